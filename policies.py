"""Checks run against the declared web stack.

Each check returns a list of violation messages instead of raising, so one
failing check never hides the other. ``audit`` joins both over the stack's
outputs.
"""
from typing import List

import pulumi


SSH_PORT = 22
OPEN_IPV4 = "0.0.0.0/0"
OPEN_IPV6 = "::/0"
ALL_PROTOCOLS = ("-1", "all")
# from_port/to_port hold an ICMP type and code for these.
ICMP_PROTOCOLS = ("icmp", "icmpv6", "1", "58")


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def rule_field(rule, name):
    # Rules come back either as plain dicts or as pulumi output types.
    if isinstance(rule, dict):
        if name in rule:
            return rule[name]
        return rule.get(_camel(name))
    return getattr(rule, name, None)


def covers_ssh(rule) -> bool:
    protocol = str(rule_field(rule, "protocol") or "").lower()
    if protocol in ALL_PROTOCOLS:
        return True
    if protocol in ICMP_PROTOCOLS:
        return False
    description = str(rule_field(rule, "description") or "").strip().lower()
    if description == "ssh":
        return True
    from_port = rule_field(rule, "from_port")
    to_port = rule_field(rule, "to_port")
    if from_port is None or to_port is None:
        return False
    return int(from_port) <= SSH_PORT <= int(to_port)


def open_to_world(rule) -> bool:
    return (OPEN_IPV4 in (rule_field(rule, "cidr_blocks") or [])
            or OPEN_IPV6 in (rule_field(rule, "ipv6_cidr_blocks") or []))


def exposes_ssh(rule) -> bool:
    """True when ``rule`` lets anyone on the internet reach port 22."""
    return covers_ssh(rule) and open_to_world(rule)


def check_ingress(urn, ingress) -> List[str]:
    return [
        f"security group {urn} exposes port {SSH_PORT} to the Internet "
        f"(rule {index}: {rule_field(rule, 'from_port')}-{rule_field(rule, 'to_port')})"
        for index, rule in enumerate(ingress or [])
        if exposes_ssh(rule)
    ]


def check_name_tag(urn, tags) -> List[str]:
    if not tags or not tags.get("Name"):
        return [f"instance {urn} must have a Name tag"]
    return []


def _report(resource, violations):
    for message in violations:
        pulumi.log.warn(message, resource=resource)
    return violations


def audit(infra) -> pulumi.Output:
    """Run both checks over ``infra`` and return every violation found.

    The two checks resolve independently; the returned output settles once
    both have run.
    """
    group, server = infra.group, infra.server

    ingress_violations = pulumi.Output.all(group.urn, group.ingress).apply(
        lambda args: _report(group, check_ingress(*args)))
    tag_violations = pulumi.Output.all(server.urn, server.tags).apply(
        lambda args: _report(server, check_name_tag(*args)))

    return pulumi.Output.all(ingress_violations, tag_violations).apply(
        lambda results: results[0] + results[1])
