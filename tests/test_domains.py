import asyncio

import pytest

from ccbff.domains import derive_region
from ccbff.errors import BFFError, ErrorKind


run = asyncio.run


def test_region_table():
    assert derive_region("va.msg.liveperson.net").to_dict() == {"zone": "z1", "region": "va", "geo": "p-us"}
    assert derive_region("lo.msg.liveperson.net").to_dict() == {"zone": "z2", "region": "lo", "geo": "p-eu"}
    assert derive_region("https://sy.msg.liveperson.net").to_dict() == {"zone": "z3", "region": "sy", "geo": "p-au"}


def test_unknown_region_prefix_fails_fast():
    with pytest.raises(BFFError) as ei:
        derive_region("qa.msg.example.com", account_id="9")
    assert ei.value.kind == ErrorKind.CONFIG
    assert ei.value.context["account_id"] == "9"


def test_synthesized_host_from_sydney_account(services, fake_lp):
    fake_lp.messaging_host = "sy.msg.example.com"
    resolver = services.resolver
    assert run(resolver.get_domain("123", "aistudio")) == "aistudio-p-au.liveperson.net"
    assert run(resolver.get_domain("123", "aistudio")) == "aistudio-p-au.liveperson.net"
    assert fake_lp.csds_calls == 1
    assert run(resolver.get_domain("123", "recommendation")) == "z3.askmaven.liveperson.net"
    assert run(resolver.get_domain("123", "proactive")) == "proactive-messaging.z3.fs.liveperson.com"
    assert run(resolver.get_domain("123", "botPlatform")) == "sy.bc-platform.liveperson.net"


def test_directory_entry_wins_over_synthesized(services, fake_lp):
    fake_lp.extra_entries = [{"account": "123", "service": "proactive", "baseURI": "custom.proactive.host"}]
    assert run(services.resolver.get_domain("123", "proactive")) == "custom.proactive.host"
    domains = run(services.resolver.get_domains("123"))
    assert [e.service for e in domains].count("proactive") == 1


def test_messaging_entry_required_before_anything_else(services, fake_lp):
    fake_lp.include_messaging = False
    with pytest.raises(BFFError) as ei:
        run(services.resolver.get_domain("123", "msgHist"))
    assert ei.value.kind == ErrorKind.CONFIG


def test_unknown_service_is_none(services):
    assert run(services.resolver.get_domain("123", "doesNotExist")) is None


def test_stable_within_ttl_and_refetched_after(services, fake_lp, clock):
    resolver = services.resolver
    assert run(resolver.get_domain("123", "msgHist")) == "va.msghist.liveperson.net"
    clock.advance(3599)
    assert run(resolver.get_domain("123", "msgHist")) == "va.msghist.liveperson.net"
    assert fake_lp.csds_calls == 1
    clock.advance(2)
    run(resolver.get_domain("123", "msgHist"))
    assert fake_lp.csds_calls == 2


def test_clear_domain_cache_forces_fetch(services, fake_lp):
    resolver = services.resolver
    run(resolver.get_domain("123", "sentinel"))
    run(resolver.get_domain("456", "sentinel"))
    resolver.clear_domain_cache("123")
    run(resolver.get_domain("123", "sentinel"))
    run(resolver.get_domain("456", "sentinel"))
    assert fake_lp.csds_calls == 3


def test_accounts_in_same_region_do_not_share_entries(services, fake_lp):
    run(services.resolver.get_domains("123"))
    entries = run(services.resolver.get_domains("456"))
    assert {e.account for e in entries} == {"456"}
    assert fake_lp.csds_calls == 2


def test_directory_failure_propagates(services, fake_lp):
    fake_lp.csds_status = 503
    with pytest.raises(BFFError) as ei:
        run(services.resolver.get_domain("123", "sentinel"))
    assert ei.value.kind == ErrorKind.UPSTREAM
    assert ei.value.status_code == 500
    assert fake_lp.csds_calls == 1


def test_concurrent_misses_fetch_once(services, fake_lp):
    async def _both():
        return await asyncio.gather(
            services.resolver.get_domain("123", "sentinel"),
            services.resolver.get_domain("123", "idp"),
        )

    assert run(_both()) == ["va.sentinel.liveperson.net", "va.idp.liveperson.net"]
    assert fake_lp.csds_calls == 1


def test_no_per_account_state_left_after_fetches(services, fake_lp):
    resolver = services.resolver
    for i in range(50):
        run(resolver.get_domain(str(i), "sentinel"))
        resolver.clear_domain_cache(str(i))
    fake_lp.csds_status = 503
    with pytest.raises(BFFError):
        run(resolver.get_domain("x", "sentinel"))
    assert resolver._inflight == {}
    # a failed fetch is not remembered
    fake_lp.csds_status = 200
    assert run(resolver.get_domain("x", "sentinel")) == "va.sentinel.liveperson.net"
