"""Shared fixtures: fake timer, fake LLM provider, filled-in snapshots."""

import asyncio
from typing import Callable, List, Optional

import pytest

from vitae.contexts.document.defaults import get_default_snapshot
from vitae.utils.llm import LLMProvider, LLMRequestError, LLMResponse


class FakeHandle:
    def __init__(self, timer: "FakeTimer", callback: Callable[[], None]):
        self.timer = timer
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeTimer:
    """Stand-in for loop.call_later; fire() runs every live callback."""

    def __init__(self):
        self.handles: List[FakeHandle] = []
        self.delays: List[float] = []

    def __call__(self, delay, callback):
        handle = FakeHandle(self, callback)
        self.handles.append(handle)
        self.delays.append(delay)
        return handle

    @property
    def live(self) -> List[FakeHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def fire(self) -> int:
        live = self.live
        self.handles = []
        for handle in live:
            handle.callback()
        return len(live)


class FakeProvider(LLMProvider):
    """
    LLM provider returning canned replies.

    Each call records its prompts. If `gate` is set, calls wait on it before
    answering, which lets tests interleave overlapping requests.
    """

    _provider_prefix = "fake"

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[LLMRequestError] = None):
        self.update_model("test-model")
        self.replies = list(replies or ["• 改写结果"])
        self.error = error
        self.calls: List[tuple] = []
        self.gates: List[asyncio.Event] = []

    async def _call_api(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        self.calls.append((system_prompt, user_prompt))
        index = len(self.calls) - 1
        if index < len(self.gates):
            await self.gates[index].wait()
        if self.error is not None:
            raise self.error
        reply = self.replies[min(index, len(self.replies) - 1)]
        return LLMResponse(content=reply, model=self.model, input_tokens=10, output_tokens=5)


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for providers with custom replies or errors."""
    return FakeProvider


@pytest.fixture
def filled_snapshot():
    """A realistic snapshot with every module populated."""
    snapshot = get_default_snapshot()
    snapshot["profile"].update(
        {
            "name": "张三",
            "jobTitle": "后端工程师",
            "phone": "13800000000",
            "email": "zhangsan@example.com",
            "city": "上海",
        }
    )
    snapshot["education"] = [
        {
            "school": "复旦大学",
            "major": "计算机科学",
            "degree": "本科",
            "startDate": "2015.09",
            "endDate": "2019.06",
            "desc": "",
        }
    ]
    snapshot["experience"] = [
        {
            "company": "某科技公司",
            "position": "高级工程师",
            "startDate": "2019.07",
            "endDate": "至今",
            "desc": "负责支付系统\n主导服务拆分",
        },
        {"company": "", "position": "", "startDate": "", "endDate": "", "desc": ""},
    ]
    snapshot["projects"] = [
        {"projectName": "订单中心", "role": "负责人", "startDate": "2021.01", "endDate": "", "desc": "重构订单链路"}
    ]
    snapshot["skillsContent"] = "Python / Go\nKubernetes"
    snapshot["summaryContent"] = "五年后端经验"
    snapshot["awardsContent"] = ""
    return snapshot
