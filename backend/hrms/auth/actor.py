from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentActor:
    """Authenticated caller as resolved from the bearer token."""

    subject: str
    role: str
