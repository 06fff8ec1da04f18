"""Self-signup policy: which emails may create an account without an invitation."""

from src.gatehouse.core.config import Settings, get_settings


class DomainPolicy:
    def __init__(self, allowed_domains: list[str], allow_unlisted: bool = False):
        self.allowed_domains = [d.lower() for d in allowed_domains]
        self.allow_unlisted = allow_unlisted

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DomainPolicy":
        settings = settings or get_settings()
        return cls(settings.allowed_register_domains, settings.allow_unlisted_signup)

    def can_register_without_invitation(self, email: str) -> bool:
        if self.allow_unlisted:
            return True
        _, sep, domain = email.rpartition("@")
        if not sep or not domain:
            return False
        return domain.lower() in self.allowed_domains
