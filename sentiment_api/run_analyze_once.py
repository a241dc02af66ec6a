from __future__ import annotations

import json
import logging
import sys

from sentiment_api.settings import load_settings
from sentiment_api.web import build_analyzer

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    s = load_settings()
    logging.basicConfig(
        level=s.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    texts = list(sys.argv[1:] if argv is None else argv)
    if not texts:
        texts = [ln.rstrip("\n") for ln in sys.stdin if ln.strip()]

    analyzer = build_analyzer(s)

    results = []
    for text in texts:
        r = analyzer.analyze(text)
        results.append({"text": text, "sentiment": r.label, "confidence": r.confidence})
    logger.info("Analyzed texts: %s", len(results))

    print(json.dumps({"results": results, "count": len(results)}, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
