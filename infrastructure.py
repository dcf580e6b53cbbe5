from typing import NamedTuple, Optional

import pulumi
import pulumi_aws as aws

import policies


# Ubuntu 18.04 images published by Canonical.
DEFAULT_AMI_NAME_PATTERN = "ubuntu/images/hvm-ssd/ubuntu-bionic-18.04-amd64-server-*"
DEFAULT_AMI_OWNER = "137112412989"
DEFAULT_INSTANCE_TYPE = "t2.micro"


def default_ingress():
    # HTTP only. Add {"protocol": "tcp", "from_port": 22, "to_port": 22, ...}
    # to see the ingress policy fail.
    return [
        {"protocol": "tcp", "from_port": 80, "to_port": 80, "cidr_blocks": ["0.0.0.0/0"]},
    ]


def default_tags():
    # Drop the Name tag to see the tag policy fail.
    return {"Name": "webserver"}


class Infrastructure(NamedTuple):
    group: aws.ec2.SecurityGroup
    server: aws.ec2.Instance


def _validate_ingress(ingress):
    for rule in ingress:
        if not isinstance(rule, dict):
            continue
        if policies.rule_field(rule, "from_port") is None or policies.rule_field(rule, "to_port") is None:
            raise ValueError(f"ingress rule {rule!r} needs both from_port and to_port")


def create_infrastructure(name_prefix: Optional[str] = None,
                          ingress: Optional[list] = None,
                          tags: Optional[dict] = None,
                          instance_type: Optional[str] = None) -> Infrastructure:
    """Declare the web security group and the instance running in it.

    Explicit arguments win over stack config. Passing ``ingress=[]`` or
    ``tags={}`` declares no rules / no tags; only ``None`` picks the defaults.
    """
    config = pulumi.Config()

    # Optional prefix so several copies can live in one stack:
    name_prefix = name_prefix if name_prefix is not None else (config.get("namePrefix") or "")
    # The web server's size:
    instance_type = instance_type or config.get("instanceType") or DEFAULT_INSTANCE_TYPE
    # Which image to boot:
    ami_name_pattern = config.get("amiNamePattern") or DEFAULT_AMI_NAME_PATTERN
    ami_owner = config.get("amiOwner") or DEFAULT_AMI_OWNER

    if ingress is None:
        ingress = default_ingress()
    if tags is None:
        tags = default_tags()
    _validate_ingress(ingress)

    group = aws.ec2.SecurityGroup(f"{name_prefix}web-secgrp",
        description="Enable HTTP access",
        ingress=ingress)
    pulumi.log.debug(f"declared security group with {len(ingress)} ingress rule(s)", resource=group)

    # Most recent matching image; the lookup result is opaque to us.
    ami = aws.ec2.get_ami(
        filters=[aws.ec2.GetAmiFilterArgs(
            name="name",
            values=[ami_name_pattern],
        )],
        owners=[ami_owner],
        most_recent=True)
    pulumi.log.info(f"using image {ami.id} for {name_prefix}web-server-www")

    server = aws.ec2.Instance(f"{name_prefix}web-server-www",
        instance_type=instance_type,
        # reference the group's id output so the instance waits for it
        vpc_security_group_ids=[group.id],
        ami=ami.id,
        tags=tags)

    return Infrastructure(group=group, server=server)
