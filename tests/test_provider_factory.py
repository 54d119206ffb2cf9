import os, sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from models.problem import ProviderType
from providers import BaseProvider, GFGProvider, LeetCodeProvider, ProviderFactory, PROVIDER_REGISTRY
from utils.error_handler import UnsupportedProvider
from fakes import fast_settings


@pytest.mark.parametrize("provider_id", [p.value for p in PROVIDER_REGISTRY])
def test_every_registered_provider_is_supported_and_creatable(provider_id):
    assert ProviderFactory.is_supported(provider_id)
    provider = ProviderFactory.create(provider_id, fast_settings())
    assert isinstance(provider, BaseProvider)
    assert provider.PROVIDER.value == provider_id


@pytest.mark.parametrize("provider_id,expected", [
    ("leetcode", LeetCodeProvider),
    (" Gfg ", GFGProvider),
    (ProviderType.GFG, GFGProvider),
])
def test_identifiers_are_case_insensitive(provider_id, expected):
    assert isinstance(ProviderFactory.create(provider_id, fast_settings()), expected)


@pytest.mark.parametrize("provider_id", ["CODEFORCES", "", "leet code", None, 42])
def test_unknown_provider_raises(provider_id):
    assert not ProviderFactory.is_supported(provider_id)
    with pytest.raises(UnsupportedProvider) as exc_info:
        ProviderFactory.create(provider_id)
    assert exc_info.value.error_info.context["supported"] == ["LEETCODE", "GFG"]


def test_list_supported():
    assert ProviderFactory.list_supported() == ["LEETCODE", "GFG"]


def test_each_create_returns_a_new_adapter():
    first = ProviderFactory.create("LEETCODE", fast_settings())
    second = ProviderFactory.create("LEETCODE", fast_settings())
    assert first is not second
    assert first.session is not second.session


def test_created_provider_does_not_launch_a_browser():
    provider = ProviderFactory.create("GFG", fast_settings())
    assert provider.session.driver is None
    provider.close_browser()
