import asyncio

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from conftest import make_config
from quality_agent.llm.llm_client import QualityLLMClient, message_text


class RecordingChatModel:
    def __init__(self, reply):
        self.reply = reply
        self.messages = []

    async def ainvoke(self, messages):
        self.messages.append(messages)
        return AIMessage(content=self.reply)


def test_generate_uses_indexed_document_as_context():
    model = RecordingChatModel("assessment")
    client = QualityLLMClient(make_config(), llm_factory=lambda name: model)

    asyncio.run(client.add_document("PROJ-index", "Totals include tax and shipping."))
    reply = asyncio.run(client.generate("gpt-x", "PROJ-index", "Are totals tested?"))

    system, human = model.messages[0]
    assert reply == "assessment"
    assert isinstance(system, SystemMessage)
    assert "Totals include tax and shipping." in system.content
    assert isinstance(human, HumanMessage)
    assert human.content == "Are totals tested?"


def test_make_call_to_model_sends_prompt_as_system_message():
    model = RecordingChatModel('{"summary": "ok", "score": 5}')
    client = QualityLLMClient(make_config(), llm_factory=lambda name: model)

    reply = asyncio.run(client.make_call_to_model("gpt-x", "verbose text", "summarize"))

    system, human = model.messages[0]
    assert reply == '{"summary": "ok", "score": 5}'
    assert system.content == "summarize"
    assert human.content == "verbose text"


def test_one_model_instance_per_name():
    created = []

    def factory(name):
        created.append(name)
        return FakeListChatModel(responses=["a", "b", "c"])

    client = QualityLLMClient(make_config(), llm_factory=factory)
    asyncio.run(client.make_call_to_model("gpt-x", "t", "p"))
    asyncio.run(client.make_call_to_model("gpt-x", "t", "p"))
    asyncio.run(client.make_call_to_model("claude-y", "t", "p"))

    assert created == ["gpt-x", "claude-y"]


def test_message_text_flattens_content_blocks():
    assert message_text("plain") == "plain"
    assert message_text([{"type": "text", "text": "a"}, "b", {"type": "image"}]) == "ab"
