"""Update the cost or TLS credentials of an existing link."""

from __future__ import annotations

from dataclasses import dataclass

from ..builders import SPEC_EQUALITY, create_link_update
from ..constants import CRD_HELP_ERROR, KIND_LINK, KIND_SECRET, KIND_SITE, MILESTONE_READY
from ..reconciler import ResourceReconciler
from ..services.kube.base import ObjectStore
from ..utils.errors import NotFoundError, StoreError, ValidationError
from ..utils.retry import PRODUCTION_PROFILE, RetryProfile
from ..utils.validation import NumberValidator
from ..waiter import ConditionWaiter, validate_wait


@dataclass
class LinkUpdateFlags:
    """Raw user input for a link update."""

    cost: str = "1"
    tls_credentials: str = ""
    timeout: float = 60.0
    wait: str = MILESTONE_READY


class CmdLinkUpdate:
    """Validate, apply and optionally wait for a link update."""

    def __init__(
        self,
        store: ObjectStore,
        namespace: str,
        flags: LinkUpdateFlags | None = None,
        profile: RetryProfile = PRODUCTION_PROFILE,
    ):
        self.store = store
        self.namespace = namespace
        self.flags = flags
        self.profile = profile
        self.reconciler = ResourceReconciler(store, SPEC_EQUALITY)
        self.waiter = ConditionWaiter(store, KIND_LINK, profile)

        self.link_name = ""
        self.cost = 0
        self.tls_credentials = ""
        self.timeout = 0.0
        self.status = ""

    def validate_input(self, args: list[str]) -> None:
        """Check arguments and flags against the namespace.

        Raises:
            ValidationError: With every problem found, one per line
                or the CRD installation hint alone
        """
        problems: list[str] = []
        flags = self.flags or LinkUpdateFlags()

        try:
            sites = self.store.list(KIND_SITE, self.namespace)
        except StoreError as e:
            # Listing a kind whose definition is not installed answers 404
            if e.status == 404:
                raise ValidationError(CRD_HELP_ERROR) from e
            raise
        if not sites:
            problems.append("there is no skupper site in this namespace")

        if not args or not args[0]:
            problems.append("link name must not be empty")
        elif len(args) > 1:
            problems.append("only one argument is allowed for this command")
        else:
            self.link_name = args[0]
            try:
                self.store.get(KIND_LINK, self.namespace, self.link_name)
            except NotFoundError as e:
                problems.append(f'the link "{self.link_name}" is not available in the namespace: {e}')

        if flags.cost:
            ok, reason = NumberValidator().evaluate(flags.cost)
            if not ok:
                problems.append(f"link cost is not valid: {reason}")

        if flags.tls_credentials:
            try:
                self.store.get(KIND_SECRET, self.namespace, flags.tls_credentials)
            except NotFoundError as e:
                problems.append(
                    f'the TLS secret "{flags.tls_credentials}" is not available in the namespace: {e}'
                )

        problems.extend(validate_wait(flags.wait or MILESTONE_READY, flags.timeout, self.profile))

        if problems:
            raise ValidationError(problems)

    def input_to_options(self) -> None:
        flags = self.flags or LinkUpdateFlags()
        self.cost = int(flags.cost) if flags.cost else 0
        self.tls_credentials = flags.tls_credentials
        self.timeout = flags.timeout
        self.status = flags.wait or MILESTONE_READY

    def run(self) -> str:
        """Apply the update; a link that no longer exists is never recreated."""
        existing = self.store.get(KIND_LINK, self.namespace, self.link_name)
        desired = create_link_update(existing, cost=self.cost, tls_credentials=self.tls_credentials)
        return self.reconciler.ensure(self.namespace, desired, create_missing=False)

    def wait_until(self) -> None:
        self.waiter.wait(self.namespace, self.link_name, self.status or MILESTONE_READY, self.timeout)
