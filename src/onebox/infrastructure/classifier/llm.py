"""LLM-backed email classifier."""

from __future__ import annotations

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from loguru import logger

from onebox.application.ports.classifier import EmailClassifier
from onebox.domain.categories import EmailCategory
from onebox.infrastructure.settings import Settings, get_settings

CLASSIFY_PROMPT = """You sort inbound sales emails into exactly one category.

Categories:
{categories}

Rules:
- "Interested": the sender wants to continue the conversation or asks for details.
- "Meeting Booked": a meeting, call or demo has been scheduled or confirmed.
- "Not Interested": the sender declines or asks not to be contacted.
- "Spam": unsolicited bulk, promotional or phishing mail.
- "Out of Office": automatic absence or vacation replies.
- "Unlabelled": none of the above.

Reply with the category name only, exactly as written above.

Email:
{text}

Category:"""


def create_llm(settings: Settings) -> BaseChatModel:
    """Create the appropriate LLM based on settings."""
    provider = settings.llm_provider

    if provider == "local":
        from langchain_openai import ChatOpenAI

        logger.info(f"Initializing local vLLM at {settings.vllm_base_url} with model {settings.vllm_model_name}")
        return ChatOpenAI(
            base_url=settings.vllm_base_url,
            api_key="not-needed",
            model_name=settings.vllm_model_name,
            temperature=0,
            max_tokens=16,
        )

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not settings.groq_api_key:
            raise ValueError("GROQ_API_KEY is required when llm_provider=groq")

        logger.info("Initializing Groq LLM with model llama-3.3-70b-versatile")
        return ChatGroq(
            api_key=settings.groq_api_key.get_secret_value(),
            model_name="llama-3.3-70b-versatile",
            temperature=0,
            max_tokens=16,
        )

    elif provider == "openai":
        from langchain_openai import ChatOpenAI

        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when llm_provider=openai")

        logger.info("Initializing OpenAI LLM with model gpt-4o-mini")
        return ChatOpenAI(
            api_key=settings.openai_api_key.get_secret_value(),
            model_name="gpt-4o-mini",
            temperature=0,
            max_tokens=16,
        )

    elif provider == "anthropic":
        from langchain_anthropic import ChatAnthropic

        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required when llm_provider=anthropic")

        logger.info("Initializing Anthropic LLM with model claude-3-5-haiku-latest")
        return ChatAnthropic(
            api_key=settings.anthropic_api_key.get_secret_value(),
            model_name="claude-3-5-haiku-latest",
            temperature=0,
            max_tokens=16,
        )

    else:
        raise ValueError(f"Unknown LLM provider: {provider}")


class LLMEmailClassifier(EmailClassifier):
    """Ask a chat model for one of the EmailCategory labels.

    The raw answer is returned untouched apart from whitespace; mapping it
    onto the label set is the caller's job.
    """

    def __init__(self, llm: BaseChatModel | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._llm = llm
        self._chain = None

    @property
    def llm(self) -> BaseChatModel:
        """Lazily initialize the LLM based on settings."""
        if self._llm is None:
            self._llm = create_llm(self.settings)
        return self._llm

    @property
    def chain(self):
        if self._chain is None:
            prompt = ChatPromptTemplate.from_template(CLASSIFY_PROMPT)
            self._chain = prompt | self.llm | StrOutputParser()
        return self._chain

    def classify(self, text: str) -> str:
        categories = "\n".join(f"- {c.value}" for c in EmailCategory)
        body = text[: self.settings.classifier_max_chars]
        answer = self.chain.invoke({"categories": categories, "text": body})
        return answer.strip()
