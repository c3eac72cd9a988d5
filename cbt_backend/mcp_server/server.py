from __future__ import annotations

from typing import Annotated

from fastapi.encoders import jsonable_encoder
from mcp.server.fastmcp import FastMCP

from cbt_insights.core.config import get_settings
from cbt_insights.core.logging_config import setup_logging
from cbt_insights.services.report_context import build_report_context, ensure_transcript_limits


server = FastMCP("cbt-insights")


@server.tool()
def analyze_cbt_transcript(
    messages: Annotated[
        list[dict],
        "Chat transcript as a list of {content, role} objects. Only user/assistant turns are read.",
    ],
) -> dict:
    """
    Entry point exposed to MCP clients. Extracts any CBT exercise data from the transcript,
    classifies its content tier and returns the full report context.
    """
    context = build_report_context(ensure_transcript_limits(messages))
    return jsonable_encoder(context.model_dump(by_alias=True))


def main() -> None:
    setup_logging(get_settings())
    server.run()


if __name__ == "__main__":
    main()
