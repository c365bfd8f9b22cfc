"""Hash ten zero field elements with Rescue-Prime and print the resulting state."""

import argparse
import sys
from typing import List, Optional

from .field import Fr
from .rescue_prime import rescue_prime_hash

N_INPUTS = 10


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rescue-spec",
        description="Hash ten zero field elements with Rescue-Prime (width 3, rate 2) "
                    "and print the resulting state.",
    )
    parser.parse_args(argv)

    inputs = [Fr(0)] * N_INPUTS
    state = rescue_prime_hash(inputs)
    print([int(x) for x in state])
    return 0


if __name__ == "__main__":
    sys.exit(main())
