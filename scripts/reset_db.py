from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from src.db.init_db import init_db
from src.db.models import Base
from src.db.session import get_engine


def main() -> None:
    load_dotenv()
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    init_db(engine)
    print(f"Reset DB at {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
