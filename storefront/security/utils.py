from passlib.context import CryptContext
import hashlib, hmac, uuid

def build_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=rounds)

def hash_password(ctx: CryptContext, p: str) -> str: return ctx.hash(p)

def verify_password(ctx: CryptContext, p: str, h: str) -> bool: return ctx.verify(p, h)

def generate_jti() -> str: return uuid.uuid4().hex

def token_sha256(t: str) -> str: return hashlib.sha256(t.encode('utf-8')).hexdigest()

def digests_match(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return hmac.compare_digest(a, b)
