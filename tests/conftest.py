import os
import sys

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from helpers import FakeKeyboard, FakeScheduler, FakeScreen  # noqa: E402


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def fake_screen():
    return FakeScreen()


@pytest.fixture
def fake_keyboard():
    return FakeKeyboard()

