"""
Route guard.

Turns the current authorization snapshot into a rendering decision for a
protected view: keep waiting, send the visitor to the landing page, show
the upsell placeholder, or render the view.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .models import AuthorizationSnapshot
from .session import AccessContext


class GuardPhase(str, Enum):
    LOADING = "loading"
    DECIDED = "decided"


class GuardOutcome(str, Enum):
    LOADING = "loading"    # Show a placeholder until the state resolves
    REDIRECT = "redirect"  # No principal: go to the public landing page
    UPSELL = "upsell"      # Valid principal without entitlement
    RENDER = "render"      # Render the protected view


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == GuardOutcome.RENDER


class RouteGuard:
    """
    Decides what a protected view shows for a given snapshot.

    The guard starts in LOADING and moves to DECIDED on the first resolved
    snapshot. It has no terminal state: every new snapshot is re-evaluated.
    An unentitled principal gets the upsell placeholder, not a redirect.
    """

    def __init__(self, landing_path: str = "/landing"):
        self._landing_path = landing_path
        self._phase = GuardPhase.LOADING

    @property
    def phase(self) -> GuardPhase:
        return self._phase

    @property
    def landing_path(self) -> str:
        return self._landing_path

    def evaluate(self, snapshot: AuthorizationSnapshot) -> GuardDecision:
        if not snapshot.resolved:
            self._phase = GuardPhase.LOADING
            return GuardDecision(GuardOutcome.LOADING)

        self._phase = GuardPhase.DECIDED

        if snapshot.principal is None:
            return GuardDecision(GuardOutcome.REDIRECT, redirect_to=self._landing_path)
        if not snapshot.access.has_access:
            return GuardDecision(GuardOutcome.UPSELL)
        return GuardDecision(GuardOutcome.RENDER)

    def watch(
        self,
        context: AccessContext,
        on_decision: Callable[[GuardDecision], None],
    ) -> Callable[[], None]:
        """
        Re-evaluate on every snapshot the context publishes.

        The current snapshot is evaluated immediately.

        Returns:
            A callable that stops watching.
        """
        on_decision(self.evaluate(context.snapshot))
        return context.subscribe(lambda snapshot: on_decision(self.evaluate(snapshot)))
