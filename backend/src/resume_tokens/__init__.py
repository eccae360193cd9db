"""Save-and-resume one-time codes"""

from .service import IssuedCode, VerifiedSession, generate_code, verify_code

__all__ = ["IssuedCode", "VerifiedSession", "generate_code", "verify_code"]
