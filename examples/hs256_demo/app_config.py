import os

from dotenv import load_dotenv

from compact_jwt import (
    JWTVerifier,
    StaticKeyProvider,
    allowed_algorithms_from_env,
    options_from_env,
)

load_dotenv()
GLOBAL_CONFIG = {
    "JWT_SECRET": os.environ.get("JWT_SECRET", "change-me-please-change-me-please"),
    "JWT_ISSUER": os.environ.get("JWT_ISSUER", "https://issuer.localtest.me/"),
}

JWT_SECRET = GLOBAL_CONFIG["JWT_SECRET"]
ISSUER = GLOBAL_CONFIG["JWT_ISSUER"]
ALGORITHMS = allowed_algorithms_from_env()


# configuration for JWT verification
options = options_from_env()
provider = StaticKeyProvider({alg: JWT_SECRET for alg in ALGORITHMS})
verifier = JWTVerifier(provider, ALGORITHMS, options)
