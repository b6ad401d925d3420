import pytest

from webtests.ui_testing.framework.config_model import BrowserType
from webtests.ui_testing.framework.config_resolver import (
    ConfigResolver,
    coerce_override,
    parse_override_args,
    resolve,
    select_environment,
)
from webtests.ui_testing.framework.config_model import lookup_field
from webtests.ui_testing.framework.exceptions import (
    ConfigNotFoundError,
    ConfigOverrideError,
    ConfigParseError,
    ConfigurationError,
)


def test_resolve_matches_file_content(write_profile, config_dir, qa_profile):
    write_profile("qa", qa_profile)

    config = resolve("qa", config_dir=config_dir)

    assert config.to_dict() == qa_profile
    assert config.environment.base_url == "https://qa.example.com"
    assert config.browser.type is BrowserType.CHROMIUM
    assert config.browser.timeout == 20000


def test_defaults_apply_only_to_omitted_optional_fields(write_profile, config_dir, qa_profile):
    del qa_profile["browser"]["timeout"]
    del qa_profile["execution"]["threadCount"]
    write_profile("qa", qa_profile)

    config = resolve("qa", config_dir=config_dir)

    assert config.browser.timeout == 30000
    assert config.execution.thread_count == 1


def test_override_replaces_file_value(write_profile, config_dir, qa_profile):
    write_profile("qa", qa_profile)

    config = resolve("qa", {"browser.headless": "false"}, config_dir=config_dir)

    assert config.browser.headless is False


def test_browser_type_override_keeps_other_values(write_profile, config_dir, qa_profile):
    write_profile("qa", qa_profile)

    config = resolve("qa", {"browser.type": "firefox"}, config_dir=config_dir)

    assert config.browser.type is BrowserType.FIREFOX
    assert config.browser.headless is True


def test_override_can_supply_missing_required_field(write_profile, config_dir, qa_profile):
    del qa_profile["browser"]["headless"]
    write_profile("qa", qa_profile)

    config = resolve("qa", {"browser.headless": "yes"}, config_dir=config_dir)

    assert config.browser.headless is True


def test_numeric_overrides_are_coerced(write_profile, config_dir, qa_profile):
    write_profile("qa", qa_profile)

    config = resolve(
        "qa",
        {"browser.slowMo": " 250 ", "execution.parallel": "on", "execution.threadCount": "4"},
        config_dir=config_dir,
    )

    assert config.browser.slow_mo == 250
    assert config.execution.parallel is True
    assert config.execution.effective_workers == 4


def test_test_execution_alias_in_override_and_file(write_profile, config_dir, qa_profile):
    qa_profile["testExecution"] = qa_profile.pop("execution")
    write_profile("qa", qa_profile)

    config = resolve(
        "qa",
        {"testExecution.parallel": "true", "testExecution.threadCount": "3"},
        config_dir=config_dir,
    )

    assert config.execution.parallel is True
    assert config.execution.thread_count == 3


@pytest.mark.parametrize(
    "key",
    ["browser.colour", "network.proxy", "browser", "browser.type.name", ""],
)
def test_unknown_override_path_fails(write_profile, config_dir, qa_profile, key):
    write_profile("qa", qa_profile)

    with pytest.raises(ConfigOverrideError):
        resolve("qa", {key: "x"}, config_dir=config_dir)


@pytest.mark.parametrize(
    "key, value",
    [
        ("browser.headless", "maybe"),
        ("browser.slowMo", "fast"),
        ("browser.timeout", "1.5"),
        ("browser.type", "safari"),
        ("execution.threadCount", "0"),
        ("browser.slowMo", "-5"),
    ],
)
def test_bad_override_value_fails(write_profile, config_dir, qa_profile, key, value):
    write_profile("qa", qa_profile)

    with pytest.raises(ConfigOverrideError) as excinfo:
        resolve("qa", {key: value}, config_dir=config_dir)

    assert excinfo.value.path == key


def test_missing_environment_file(config_dir):
    with pytest.raises(ConfigNotFoundError):
        resolve("prod", config_dir=config_dir)


def test_environment_name_cannot_escape_config_dir(write_profile, config_dir, qa_profile):
    write_profile("qa", qa_profile)

    with pytest.raises(ConfigNotFoundError):
        resolve("../config/qa", config_dir=config_dir)


def test_yml_extension_is_accepted(config_dir, qa_profile):
    import yaml

    (config_dir / "dev.yml").write_text(yaml.safe_dump(qa_profile), encoding="utf-8")

    assert resolve("dev", config_dir=config_dir).environment.name == "qa"


def test_missing_required_field(write_profile, config_dir, qa_profile):
    del qa_profile["screenshot"]["fullPage"]
    write_profile("qa", qa_profile)

    with pytest.raises(ConfigParseError) as excinfo:
        resolve("qa", config_dir=config_dir)

    assert excinfo.value.path == "screenshot.fullPage"


@pytest.mark.parametrize(
    "section, key, value",
    [
        ("browser", "headless", "true"),
        ("browser", "headless", 1),
        ("browser", "slowMo", True),
        ("browser", "timeout", "30000"),
        ("browser", "type", "opera"),
        ("environment", "baseUrl", 42),
        ("environment", "name", "  "),
        ("execution", "threadCount", 0),
    ],
)
def test_wrong_file_value_type(write_profile, config_dir, qa_profile, section, key, value):
    qa_profile[section][key] = value
    write_profile("qa", qa_profile)

    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)


def test_unknown_file_key_and_section(write_profile, config_dir, qa_profile):
    qa_profile["browser"]["colour"] = "blue"
    write_profile("qa", qa_profile)
    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)

    del qa_profile["browser"]["colour"]
    qa_profile["proxy"] = {"url": "http://proxy"}
    write_profile("qa", qa_profile)
    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)


def test_invalid_yaml(write_profile, config_dir):
    write_profile("qa", "browser: [unclosed\n")

    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)


def test_undecodable_file(config_dir):
    (config_dir / "qa.yaml").write_bytes(b"environment:\n  name: \xff\xfe\n")

    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)


def test_non_mapping_document(write_profile, config_dir):
    write_profile("qa", "- just\n- a list\n")

    with pytest.raises(ConfigParseError):
        resolve("qa", config_dir=config_dir)


def test_all_configuration_errors_share_a_base(config_dir):
    with pytest.raises(ConfigurationError):
        ConfigResolver(config_dir).resolve("nope")


def test_parse_override_args():
    assert parse_override_args(["browser.type=firefox", "environment.baseUrl=http://a/?x=1"]) == {
        "browser.type": "firefox",
        "environment.baseUrl": "http://a/?x=1",
    }
    assert parse_override_args(None) == {}

    with pytest.raises(ConfigOverrideError):
        parse_override_args(["browser.type"])
    with pytest.raises(ConfigOverrideError):
        parse_override_args(["=firefox"])


def test_select_environment(monkeypatch):
    monkeypatch.delenv("TEST_ENV", raising=False)
    assert select_environment() == "qa"

    monkeypatch.setenv("TEST_ENV", "staging")
    assert select_environment() == "staging"
    assert select_environment("local") == "local"


@pytest.mark.parametrize(
    "raw, expected",
    [("true", True), ("YES", True), ("1", True), ("Off", False), ("no", False), ("0", False)],
)
def test_bool_coercion_table(raw, expected):
    assert coerce_override(lookup_field("browser.headless"), raw) is expected


def test_shipped_profiles_resolve(project_root):
    resolver = ConfigResolver(project_root / "config")

    assert resolver.resolve("qa").environment.name == "qa"
    staging = resolver.resolve("staging")
    assert staging.browser.timeout == 30000
    assert staging.execution.effective_workers == 4
    assert resolver.resolve("local").browser.headless is False
