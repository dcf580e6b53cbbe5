import pulumi

import infrastructure
import policies

web = infrastructure.create_infrastructure()

pulumi.export("group_id", web.group.id)
pulumi.export("server_id", web.server.id)
pulumi.export("public_ip", web.server.public_ip)
pulumi.export("public_dns", web.server.public_dns)
# Surfaces policy warnings during preview/up as well.
pulumi.export("violations", policies.audit(web))
