"""Issue a short-lived token and verify it with the configured verifier.

Run from the repository root:

    JWT_ISSUER=https://issuer.localtest.me/ python -m examples.hs256_demo.issue_and_verify
"""

import logging
import sys
import time

from compact_jwt import InvalidToken, Token

from examples.hs256_demo.app_config import ALGORITHMS, ISSUER, JWT_SECRET, verifier


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    alg = sorted(ALGORITHMS)[0]
    token = Token(alg, {"iss": ISSUER, "sub": "demo-user", "exp": int(time.time()) + 300})
    compact = token.encode(JWT_SECRET)
    print(compact)
    print(token)

    try:
        claims = verifier.verify(compact)
    except InvalidToken as e:
        print(f"rejected: {e}", file=sys.stderr)
        return 1

    print(f"verified subject: {claims['sub']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
