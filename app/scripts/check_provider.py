"""Smoke-test an analysis provider. Usage: python -m app.scripts.check_provider [--provider groq]

Calls the provider directly (no fallback) so credential or response problems surface.
"""

import argparse
import asyncio
import json
import sys

from app.analysis.base import get_analysis_provider
from app.core.config import get_settings
from app.core.exceptions import AnalysisProviderError
from app.core.logging import configure_logging

SAMPLE_RESUME = """Jane Doe
Email: jane.doe@example.com | Phone: +1 555 0100

Summary
Software engineer with six years building data platforms and web services.

Experience
Software Engineer, Acme Corp (2019-2025)
- Built Python and SQL pipelines on AWS processing 2TB daily.
- Containerised services with Docker; mentored two engineers.

Education
BSc Computer Science, State University, 2018

Skills
Python, SQL, AWS, Docker, Git, React, communication, teamwork
"""


async def run(provider_name: str | None) -> int:
    settings = get_settings()
    if provider_name:
        settings = settings.model_copy(update={"ai_provider": provider_name})
    provider = get_analysis_provider(settings)
    try:
        result = await provider.analyze(SAMPLE_RESUME)
    except AnalysisProviderError as e:
        print(f"{provider.name} failed: {e.message}", file=sys.stderr)
        return 1
    print(json.dumps(result.to_response(), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--provider", choices=["gemini", "groq", "ollama", "mock"], default=None)
    args = parser.parse_args()
    configure_logging(debug=True)
    sys.exit(asyncio.run(run(args.provider)))


if __name__ == "__main__":
    main()
