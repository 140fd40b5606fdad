import pytest

from pmxdeploy.config import Config
from pmxdeploy.models import FormValues, RunOutcome, ValidationError, validate_form


def make_values(**overrides):
    values = FormValues(
        vmid="150",
        name="web1",
        cpu_cores="2",
        memory_gib="4",
        disk_gib="20",
        username="admin",
        password="secret",
        ipv4="10.0.0.50/24",
        ipv4_gateway="10.0.0.1",
        dns_server="1.1.1.1",
    )
    for key, value in overrides.items():
        setattr(values, key, value)
    return values


def build(**overrides):
    return validate_form(make_values(**overrides), template_id=9000, bridge="vnet1", config=Config())


@pytest.mark.parametrize("gib", [1, 2, 4, 16, 64, 512])
def test_memory_is_converted_to_mib(gib):
    assert build(memory_gib=str(gib)).memory_mib == gib * 1024


def test_ipv4_only_ipconfig_has_no_v6_suffix():
    assert build().ipconfig == "ip=10.0.0.50/24,gw=10.0.0.1"


def test_ipv6_appended_when_both_fields_given():
    req = build(ipv6="2001:db8::50/64", ipv6_gateway="2001:db8::1")
    assert req.ipconfig == (
        "ip=10.0.0.50/24,gw=10.0.0.1,ip6=2001:db8::50/64,gw6=2001:db8::1"
    )


@pytest.mark.parametrize("ipv6,gw6", [("2001:db8::50/64", ""), ("", "2001:db8::1")])
def test_one_sided_ipv6_is_dropped(ipv6, gw6):
    req = build(ipv6=ipv6, ipv6_gateway=gw6)
    assert req.ipconfig == "ip=10.0.0.50/24,gw=10.0.0.1"
    assert not req.has_ipv6


@pytest.mark.parametrize(
    "field", ["vmid", "name", "username", "password", "ipv4", "ipv4_gateway"],
)
def test_required_field_missing_is_rejected(field):
    with pytest.raises(ValidationError) as exc:
        build(**{field: ""})
    assert exc.value.fields


def test_whitespace_only_counts_as_missing():
    with pytest.raises(ValidationError):
        build(name="   ")


@pytest.mark.parametrize("field", ["ssh_key", "ipv6", "ipv6_gateway", "dns_server"])
def test_optional_fields_may_be_empty(field):
    build(**{field: ""})


def test_empty_dns_falls_back_to_default():
    assert build(dns_server="").dns_server == Config().defaults.dns_server


@pytest.mark.parametrize("field,value", [
    ("cpu_cores", "two"),
    ("memory_gib", "0"),
    ("disk_gib", "-5"),
    ("vmid", "1.5"),
])
def test_sizing_fields_must_be_positive_integers(field, value):
    with pytest.raises(ValidationError) as exc:
        build(**{field: value})
    assert "positive whole numbers" in str(exc.value)


@pytest.mark.parametrize("field", ["cpu_cores", "memory_gib", "disk_gib"])
def test_empty_sizing_takes_form_default(field):
    req = build(**{field: ""})
    assert getattr(req, field) == getattr(Config().defaults, field)


def test_empty_sizing_uses_configured_defaults():
    config = Config()
    config.defaults.memory_gib = 8
    values = make_values(cpu_cores="", memory_gib="", disk_gib="  ")
    req = validate_form(values, template_id=9000, bridge="vnet1", config=config)
    assert req.cpu_cores == 2
    assert req.memory_mib == 8192
    assert req.disk_gib == 20


def test_request_carries_configured_storage_and_domain():
    config = Config(storage="fast-ssd", search_domain="lab.example")
    req = validate_form(make_values(), template_id=9000, bridge="vnet1", config=config)
    assert req.storage == "fast-ssd"
    assert req.search_domain == "lab.example"
    assert req.template_id == 9000
    assert req.bridge == "vnet1"


def test_connection_hint_strips_network_mask():
    req = build()
    assert req.host_address == "10.0.0.50"
    assert req.connection_hint == "ssh admin@10.0.0.50"


def test_summary_shows_memory_in_both_units_and_password_warning():
    text = "\n".join(build().summary_lines())
    assert "4 GB (4096 MB)" in text
    assert "20 GB on PMX-SSD" in text
    assert "password will be set via the command line" in text


def test_cancelled_outcome_is_clean_exit():
    outcome = RunOutcome.cancelled()
    assert outcome.exit_code == 0
    assert outcome.message == "VM creation cancelled."
