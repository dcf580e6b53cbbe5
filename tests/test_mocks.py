from types import SimpleNamespace

from mocks import AMI_ID, WebserverMocks


def resource_args(name, typ="aws:ec2/securityGroup:SecurityGroup", **inputs):
    return SimpleNamespace(typ=typ, name=name, inputs=inputs)


def test_same_name_yields_same_id_and_outputs():
    mocks = WebserverMocks()
    first = mocks.new_resource(resource_args("web-secgrp", description="Enable HTTP access"))
    second = mocks.new_resource(resource_args("web-secgrp", description="Enable HTTP access"))

    assert first == second == ["web-secgrp_id", {"description": "Enable HTTP access"}]
    assert list(mocks.resources) == ["web-secgrp"]


def test_instance_gets_synthetic_address():
    mocks = WebserverMocks()
    resource_id, outputs = mocks.new_resource(
        resource_args("web-server-www", typ="aws:ec2/instance:Instance", instanceType="t2.micro"))

    assert resource_id == "web-server-www_id"
    assert outputs["instanceType"] == "t2.micro"
    assert outputs["publicIp"] == "1.2.3.4"


def test_ami_lookup_is_seeded():
    mocks = WebserverMocks()
    result = mocks.call(SimpleNamespace(token="aws:ec2/getAmi:getAmi",
                                        args={"owners": ["137112412989"], "mostRecent": True}))

    assert result["id"] == AMI_ID
    assert result["owners"] == ["137112412989"]
    assert mocks.calls == [("aws:ec2/getAmi:getAmi", {"owners": ["137112412989"], "mostRecent": True})]


def test_other_calls_echo_their_arguments():
    mocks = WebserverMocks()
    args = {"state": "available"}
    assert mocks.call(SimpleNamespace(token="aws:index/getAvailabilityZones:getAvailabilityZones", args=args)) == args
