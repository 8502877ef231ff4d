import json
import logging

import pytest

from newsfan.cli_router import CLIRouter
from newsfan.commands.base import EXIT_CONFIG_ERROR
from newsfan.core.config import ConfigManager
from newsfan.core.container import NEWSAPI_CLIENT, SOURCE_CATALOG, Container, build_container
from newsfan.core.models.source import Source
from newsfan.core.newsapi_client import NewsApiClient
from newsfan.core.sources.catalog import SourceCatalog


@pytest.fixture
def cli_container(newsapi_env, fake_session_factory, fake_response):
    newsapi_env.setenv("NEWS_SOURCE_PRIORITY", "reuters,bbc-news")
    newsapi_env.setenv("NEWS_MAX_ARTICLES", "2")

    manager = ConfigManager(load_env_file=False)
    catalog = SourceCatalog([
        Source(id="bbc-news", name="BBC News"),
        Source(id="reuters", name="Reuters"),
        Source(id="cnn", name="CNN"),
    ])
    session = fake_session_factory({
        "bbc-news": fake_response({"status": "ok", "articles": [
            {"title": "Election latest", "url": "https://bbc/1", "publishedAt": "2020-09-13T12:26:40Z"},
            {"title": "Election map", "url": "https://bbc/2", "publishedAt": "2020-09-13T12:26:41Z"},
        ]}),
        "reuters": fake_response({"status": "ok", "articles": [
            {"title": "Markets calm", "description": "Ahead of the election", "url": "https://reuters/1"},
        ]}),
        "cnn": fake_response({"status": "error", "message": "rateLimited"}),
    })

    container = build_container(manager)
    container.register_instance(SOURCE_CATALOG, catalog)
    container.register_factory(NEWSAPI_CLIENT, lambda: NewsApiClient(api_key="test-key", session=session))
    container.session = session
    return container


def test_news_search_prints_capped_json(cli_container, capsys):
    exit_code = CLIRouter(cli_container).route_command(["news", "search", "election", "--json"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert [item["link"] for item in output] == ["https://reuters/1", "https://bbc/1"]
    assert len(cli_container.session.requests) == 3


def test_news_search_text_output_and_source_filter(cli_container, capsys):
    exit_code = CLIRouter(cli_container).route_command(
        ["news", "search", "election", "--sources", "bbc-news", "--cap", "5"]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Found 2 articles for 'election'" in out
    assert "[BBC NEWS] Election latest" in out
    assert [request["params"]["source"] for request in cli_container.session.requests] == ["bbc-news"]


def test_multi_word_phrase_is_joined(cli_container, capsys):
    exit_code = CLIRouter(cli_container).route_command(["news", "search", "election", "map", "--json"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert [item["link"] for item in output] == ["https://bbc/2"]


def test_search_without_api_key_exits_before_any_request(cli_container, newsapi_env, capsys):
    newsapi_env.delenv("NEWS_API_KEY")

    exit_code = CLIRouter(cli_container).route_command(["news", "search", "election"])

    assert exit_code == EXIT_CONFIG_ERROR
    assert cli_container.session.requests == []


def test_unknown_source_is_rejected(cli_container):
    exit_code = CLIRouter(cli_container).route_command(["news", "search", "election", "--sources", "nope"])

    assert exit_code == 22


def test_sources_list_in_priority_order(cli_container, capsys):
    exit_code = CLIRouter(cli_container).route_command(["sources", "list", "--json"])

    assert exit_code == 0
    rows = json.loads(capsys.readouterr().out)
    assert [(row["id"], row["priority"]) for row in rows] == [("reuters", 1), ("bbc-news", 2), ("cnn", None)]


def test_health_check_reports_unlisted_sources(cli_container, capsys):
    exit_code = CLIRouter(cli_container).route_command(["health", "check"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "OK   configuration" in out
    assert "sources outside priority list: cnn" in out


def test_health_check_fails_without_api_key(cli_container, newsapi_env, capsys):
    newsapi_env.delenv("NEWS_API_KEY")

    exit_code = CLIRouter(cli_container).route_command(["health", "check"])

    assert exit_code == EXIT_CONFIG_ERROR
    assert "NEWS_API_KEY" in capsys.readouterr().out


def test_missing_command_prints_help(cli_container):
    assert CLIRouter(cli_container).route_command([]) == 1
    assert CLIRouter(cli_container).route_command(["news"]) == 1


def test_container_shares_singletons_and_builds_factories_per_lookup():
    container = Container()
    container.register_singleton("shared", object)
    container.register_factory("fresh", object)

    assert container.get("shared") is container.get("shared")
    assert container.get("fresh") is not container.get("fresh")
    assert container.has("shared") and not container.has("missing")
    with pytest.raises(KeyError):
        container.get("missing")


def test_container_override_restores_previous_service(cli_container):
    original = cli_container.get(SOURCE_CATALOG)
    replacement = SourceCatalog([Source(id="only", name="Only")])

    with cli_container.override(SOURCE_CATALOG, replacement):
        assert cli_container.get(SOURCE_CATALOG) is replacement

    assert cli_container.get(SOURCE_CATALOG) is original


def test_sources_list_uses_overridden_catalog(cli_container, capsys):
    with cli_container.override(SOURCE_CATALOG, SourceCatalog([Source(id="only", name="Only")])):
        exit_code = CLIRouter(cli_container).route_command(["sources", "list"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "1 configured sources:" in out
    assert "only" in out


def test_verbose_lowers_handlers_pinned_by_configured_level(cli_container, capsys):
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, root.handlers[:]
    handler = logging.StreamHandler()
    root.handlers = [handler]
    try:
        cli_container.get("config_manager").update_logging()
        assert handler.level == logging.INFO

        exit_code = CLIRouter(cli_container).route_command(["news", "search", "election", "--json", "--verbose"])

        assert exit_code == 0
        assert root.level == logging.DEBUG
        assert handler.level == logging.DEBUG
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)


def test_sources_list_works_without_api_key(newsapi_env, capsys):
    newsapi_env.delenv("NEWS_API_KEY")
    newsapi_env.setenv("NEWS_SOURCE_PRIORITY", "reuters")
    container = build_container(ConfigManager(load_env_file=False))

    exit_code = CLIRouter(container).route_command(["sources", "list", "--json"])

    assert exit_code == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows[0] == {"id": "reuters", "name": rows[0]["name"], "priority": 1}
    assert "bbc-news" in [row["id"] for row in rows]
