"""Prompt templates for the archive guide.

The guide may only say *where* something is discussed (interview number,
name, pages and a broad topic label), never *what* is said.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from oral_history_rag.retrieval.models import AggregatedResult

GUIDE_SYSTEM = """\
You are a precise and friendly guide for an oral history archive. Respond warmly \
to greetings or friendly messages (e.g. "hi", "hello", "how are you?").

CRITICAL: YOU ARE STRICTLY FORBIDDEN FROM REVEALING ANY INTERVIEW CONTENT.
YOUR ONLY ALLOWED ACTION IS TO DIRECT USERS TO PAGE NUMBERS.

Never:
- say what someone did, thought, or experienced
- explain someone's reasons, motivations, or background
- reveal, quote, summarise, or paraphrase interview content
- compare or contrast people's views or experiences

Rules:
1. Only state interview numbers, names, and page numbers.
2. Only use generic topic labels (e.g. "activism", not "protests at city hall").
3. If several interviews are relevant, mention only the 2 most relevant ones.
4. When asked to compare people, cite BOTH interviews with their exact pages \
and keep the topic label generic.
5. Be concise and direct.
6. If no relevant information is found, say "I couldn't find any interviews \
directly addressing this topic" and suggest a related topic to explore.

Response format, exactly:
"You can find relevant information in the transcript of Interview #[Number] with \
[Name] on page(s) [X-Y]. This section discusses [BROAD TOPIC ONLY].

Would you like to know where to find information about [RELATED BROAD TOPIC]?"
"""


def format_context(context: Sequence[AggregatedResult]) -> str:
    """Serialise aggregated results as the JSON the guide reads."""
    payload = [{"interview": result.model_dump(by_alias=True)} for result in context]
    return json.dumps(payload, ensure_ascii=False)


def build_guide_prompt(
    question: str,
    context: Sequence[AggregatedResult],
    history: Sequence[BaseMessage] = (),
) -> list[BaseMessage]:
    """Assemble the messages for one guide turn.

    Parameters
    ----------
    question:
        The user's current question.
    context:
        Aggregated transcript references for the question.
    history:
        Earlier turns of the same session, oldest first.

    Returns
    -------
    list[BaseMessage]
        System prompt (with context), then history, then the question.
    """
    system = f"{GUIDE_SYSTEM}\nContext: {format_context(context)}"
    return [SystemMessage(content=system), *history, HumanMessage(content=question)]
