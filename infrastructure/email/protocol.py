"""EmailProvider protocol - services depend on this, not the concrete implementation.

Every method returns True when the provider accepted the message and False
on any delivery failure; providers never raise for delivery problems.
"""

from typing import Optional, Protocol


class EmailProvider(Protocol):
    async def send_verification_code(self, email: str, code: str) -> bool: ...

    async def send_password_reset(self, email: str, reset_token: str) -> bool: ...

    async def send_welcome_email(
        self, email: str, first_name: Optional[str]
    ) -> bool: ...
