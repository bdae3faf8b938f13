import sys
import logging

from pydantic import ValidationError

from config import get_settings
from csv_io import write_accounts
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid PAYMENTS_* configuration:\n{e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format=settings.log_format,
        stream=sys.stderr,
    )

    filepath = args[0]
    engine = PaymentsEngine(num_workers=settings.num_workers)
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
