"""Built-in prompt templates.

The rephrase template turns a follow-up utterance into a standalone
search query; the answer template grounds the reply in retrieved
passages and tells the model how to decline when they fall short.
"""

from __future__ import annotations

from convo_rag.models.prompt import PromptTemplate

REPHRASE_TEMPLATE_NAME = "rephrase-question"
ANSWER_TEMPLATE_NAME = "answer-generation"

REPHRASE_SYSTEM = """\
Your task is to formulate a concise and effective query for a vector database \
search to find documents relevant to the user's inquiry. Use the conversation \
details to align the query with the user's needs.

Follow these steps:
1. Examine the chat history, focusing on exchanges related to the user's \
interest. Note any specific names, items, or methods mentioned.
2. Identify the main subject the user is asking about.
3. Refine the user's follow-up question to improve clarity and search \
precision. Preserve the original intent.
4. Output only the query that will be used for the search.

Here are a few examples to guide you:

Example 1:
Human: "I'm looking for a simple vegetarian pasta dish."
Human: "Something quick for dinner?"
AI: "Quick vegetarian pasta dinner recipes"

Example 2:
Human: "I want to bake a chocolate cake for my friend's birthday."
Human: "How to make it more moist?"
AI: "Moist chocolate cake recipe tips"

Example 3:
Human: "I'm trying to find a low-carb breakfast option."
Human: "Preferably something with eggs?"
AI: "Low-carb egg breakfast recipes"

The chat history follows."""

REPHRASE_HUMAN = "Follow-Up Question: {input}"

ANSWER_SYSTEM = """\
You are a knowledgeable assistant equipped to answer questions using the \
reference documents below. Base your answer on the documents and the chat \
history. If the documents do not contain enough information to answer \
directly, say so, guide the user towards what you can help with, or suggest \
what additional information they could provide.

<context>
{context}
</context>"""

ANSWER_HUMAN = (
    "Using the given context and chat history, please address the following inquiry:\n"
    "{question}"
)

REPHRASE_TEMPLATE = PromptTemplate(
    name=REPHRASE_TEMPLATE_NAME,
    system=REPHRASE_SYSTEM,
    human=REPHRASE_HUMAN,
)

ANSWER_TEMPLATE = PromptTemplate(
    name=ANSWER_TEMPLATE_NAME,
    system=ANSWER_SYSTEM,
    human=ANSWER_HUMAN,
)


def default_templates() -> list[PromptTemplate]:
    """Return the built-in rephrase and answer templates."""
    return [REPHRASE_TEMPLATE, ANSWER_TEMPLATE]
