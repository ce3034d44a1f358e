"""Tests for the link update command."""

from __future__ import annotations

import pytest

from sitelink_controller.commands import CmdLinkUpdate, LinkUpdateFlags
from sitelink_controller.utils.errors import (
    ConditionFailedError,
    NotFoundError,
    StoreError,
    ValidationError,
    WaitTimeoutError,
)
from sitelink_controller.utils.retry import TEST_PROFILE

from conftest import FakeObjectStore

LINK_SPEC = {"endpoints": [{"name": "inter-router", "host": "10.0.0.1", "port": "55671"}], "cost": 1, "tlsCredentials": "link-creds"}


@pytest.fixture
def site_store(store: FakeObjectStore) -> FakeObjectStore:
    """Store with a site, a link and a TLS secret."""
    store.add("Site", "my-site")
    store.add("Link", "my-link", spec=dict(LINK_SPEC))
    store.add("Secret", "new-creds")
    return store


def _command(store: FakeObjectStore, **flags) -> CmdLinkUpdate:
    return CmdLinkUpdate(store, "test", LinkUpdateFlags(**flags))


def _problems(command: CmdLinkUpdate, args: list[str]) -> list[str]:
    with pytest.raises(ValidationError) as exc_info:
        command.validate_input(args)
    return exc_info.value.messages


class TestValidateInput:
    """Test argument and flag validation."""

    def test_valid(self, site_store: FakeObjectStore) -> None:
        command = _command(site_store, cost="5", tls_credentials="new-creds")

        command.validate_input(["my-link"])

        assert command.link_name == "my-link"

    def test_missing_crd(self) -> None:
        """A missing resource definition yields only the installation hint."""
        store = FakeObjectStore(error="the server could not find the requested resource", error_status=404)

        assert _problems(_command(store), ["my-link", "8080"]) == [
            'The Skupper CRDs are not yet installed. To install them, run "skupper install"'
        ]

    def test_other_store_errors_propagate(self) -> None:
        store = FakeObjectStore(error="forbidden", error_status=403)

        with pytest.raises(StoreError, match="forbidden"):
            _command(store).validate_input(["my-link"])

    def test_no_site(self, store: FakeObjectStore) -> None:
        store.add("Link", "my-link", spec=dict(LINK_SPEC))

        assert _problems(_command(store), ["my-link"]) == ["there is no skupper site in this namespace"]

    def test_missing_name(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store), []) == ["link name must not be empty"]
        assert _problems(_command(site_store), [""]) == ["link name must not be empty"]

    def test_too_many_arguments(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store), ["my-link", "other"]) == [
            "only one argument is allowed for this command"
        ]

    def test_link_not_found(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store), ["no-such-link"]) == [
            'the link "no-such-link" is not available in the namespace: links.skupper.io "no-such-link" not found'
        ]

    def test_cost_not_a_number(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store, cost="one"), ["my-link"]) == [
            'link cost is not valid: strconv.Atoi: parsing "one": invalid syntax'
        ]

    def test_cost_not_positive(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store, cost="-4"), ["my-link"]) == [
            "link cost is not valid: value is not positive"
        ]

    def test_tls_secret_not_found(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store, tls_credentials="missing"), ["my-link"]) == [
            'the TLS secret "missing" is not available in the namespace: secrets "missing" not found'
        ]

    def test_timeout_below_floor(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store, timeout=0), ["my-link"]) == [
            "timeout is not valid: duration must not be less than 10s; got 0s"
        ]

    def test_timeout_ignored_without_wait(self, site_store: FakeObjectStore) -> None:
        _command(site_store, timeout=0, wait="none").validate_input(["my-link"])

    def test_invalid_wait_status(self, site_store: FakeObjectStore) -> None:
        assert _problems(_command(site_store, wait="created"), ["my-link"]) == [
            "status is not valid: value created not allowed. It should be one of this options: [ready configured none]"
        ]

    def test_problems_are_collected(self, store: FakeObjectStore) -> None:
        problems = _problems(_command(store, cost="zero", timeout=1), [])

        assert problems == [
            "there is no skupper site in this namespace",
            "link name must not be empty",
            'link cost is not valid: strconv.Atoi: parsing "zero": invalid syntax',
            "timeout is not valid: duration must not be less than 10s; got 1s",
        ]

    def test_no_flags(self, site_store: FakeObjectStore) -> None:
        CmdLinkUpdate(site_store, "test").validate_input(["my-link"])


class TestInputToOptions:
    """Test conversion of flags into options."""

    def test_options(self, site_store: FakeObjectStore) -> None:
        command = _command(site_store, cost="5", tls_credentials="new-creds", timeout=90, wait="configured")

        command.input_to_options()

        assert command.cost == 5
        assert command.tls_credentials == "new-creds"
        assert command.timeout == 90
        assert command.status == "configured"

    def test_empty_wait_defaults_to_ready(self, site_store: FakeObjectStore) -> None:
        command = _command(site_store, wait="")

        command.input_to_options()

        assert command.status == "ready"


class TestRun:
    """Test applying the update."""

    def _prepared(self, store: FakeObjectStore, **flags) -> CmdLinkUpdate:
        command = _command(store, **flags)
        command.validate_input(["my-link"])
        command.input_to_options()
        return command

    def test_updates_cost(self, site_store: FakeObjectStore) -> None:
        result = self._prepared(site_store, cost="5").run()

        assert result == "updated"
        assert len(site_store.updates) == 1
        spec = site_store.updates[0]["spec"]
        assert spec["cost"] == 5
        assert spec["tlsCredentials"] == "link-creds"
        assert spec["endpoints"] == LINK_SPEC["endpoints"]

    def test_updates_tls_credentials(self, site_store: FakeObjectStore) -> None:
        self._prepared(site_store, tls_credentials="new-creds").run()

        assert site_store.updates[0]["spec"]["tlsCredentials"] == "new-creds"
        assert site_store.updates[0]["spec"]["cost"] == 1

    def test_no_change(self, site_store: FakeObjectStore) -> None:
        assert self._prepared(site_store, cost="1").run() == "unchanged"
        assert site_store.writes == 0

    def test_link_deleted_before_run(self, site_store: FakeObjectStore) -> None:
        """A link removed after validation is never recreated."""
        command = self._prepared(site_store, cost="5")
        del site_store.objects[("Link", "test", "my-link")]

        with pytest.raises(NotFoundError):
            command.run()

        assert site_store.writes == 0


class TestWaitUntil:
    """Test waiting for the updated link."""

    def _prepared(self, store: FakeObjectStore, **flags) -> CmdLinkUpdate:
        command = CmdLinkUpdate(store, "test", LinkUpdateFlags(**flags), profile=TEST_PROFILE)
        command.validate_input(["my-link"])
        command.input_to_options()
        return command

    def test_wait_none(self, site_store: FakeObjectStore) -> None:
        command = self._prepared(site_store, wait="none")
        gets = site_store.gets

        command.wait_until()

        assert site_store.gets == gets

    def test_wait_ready(self, site_store: FakeObjectStore) -> None:
        site_store.set_conditions("Link", "my-link", [{"type": "Ready", "status": "True"}])

        self._prepared(site_store, timeout=5).wait_until()

    def test_wait_configured(self, site_store: FakeObjectStore) -> None:
        site_store.set_conditions("Link", "my-link", [{"type": "Configured", "status": "True"}])

        self._prepared(site_store, timeout=5, wait="configured").wait_until()

    def test_wait_failed(self, site_store: FakeObjectStore) -> None:
        site_store.set_conditions(
            "Link", "my-link", [{"type": "Ready", "status": "False", "reason": "Error", "message": "no route"}]
        )

        with pytest.raises(ConditionFailedError, match="no route"):
            self._prepared(site_store, timeout=5).wait_until()

    def test_wait_timeout(self, site_store: FakeObjectStore) -> None:
        with pytest.raises(WaitTimeoutError):
            self._prepared(site_store, timeout=0.2).wait_until()
