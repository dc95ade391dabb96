import pytest
from pydantic import ValidationError

from elc_src.errors import ConfigError, NotFoundError
from elc_src.models import ServiceDef, WorkspaceConfig
from elc_src.workspace import Workspace


def test_compact_dependencies_are_normalized():
    svc = ServiceDef(
        path="apps/api",
        dependencies={"db": ["default", "hook"], "redis": "default", "mq": None},
    )
    assert [(d.name, d.mode) for d in svc.depends_on] == [
        ("db", "default"),
        ("db", "hook"),
        ("redis", "default"),
        ("mq", "default"),
    ]
    assert svc.dependencies_for("hook") == ["db"]


def test_dependency_list_form_defaults_mode():
    svc = ServiceDef(
        path="x", depends_on=[{"name": "db"}, {"name": "s3", "mode": "full"}]
    )
    assert svc.dependencies_for("default") == ["db"]
    assert svc.dependencies_for("full") == ["s3"]


def test_unknown_references_are_rejected():
    with pytest.raises(ValidationError) as exc:
        WorkspaceConfig(
            services={"api": {"path": "api", "dependencies": {"db": ["default"]}}},
            modules={"cli": {"hosted_in": "worker", "exec_path": "/app"}},
        )
    message = str(exc.value)
    assert "unknown service 'db'" in message
    assert "unknown service 'worker'" in message


def test_names_are_filled_from_keys_in_declaration_order():
    config = WorkspaceConfig(
        services={"web": {"path": "web"}, "worker": {"path": "w"}, "db": {"path": "d"}},
        modules={"cli": {"hosted_in": "web", "exec_path": "/app"}},
    )
    assert list(config.services) == ["web", "worker", "db"]
    assert config.services["worker"].name == "worker"
    assert config.modules["cli"].name == "cli"


def test_load_missing_manifest(tmp_path):
    with pytest.raises(ConfigError):
        Workspace.load(tmp_path)


def test_load_invalid_manifest_raises_config_error(tmp_path):
    (tmp_path / "workspace.yaml").write_text(
        "services:\n  api:\n    compose_file: x.yml\n", encoding="utf-8"
    )
    with pytest.raises(ConfigError):
        Workspace.load(tmp_path)


@pytest.mark.parametrize(
    "manifest",
    [
        "services:\n  api:\n    path: a\n  api:\n    path: b\n",
        "services:\n  api:\n    path: a\n"
        "modules:\n  cli:\n    hosted_in: api\n    exec_path: /x\n"
        "  cli:\n    hosted_in: api\n    exec_path: /y\n",
    ],
    ids=["service", "module"],
)
def test_duplicate_keys_raise_config_error(tmp_path, manifest):
    (tmp_path / "workspace.yaml").write_text(manifest, encoding="utf-8")
    with pytest.raises(ConfigError, match="duplicate key '(api|cli)'"):
        Workspace.load(tmp_path)


@pytest.mark.parametrize(
    ("required", "ok"),
    [("0.1.0", True), ("0.4.0", True), ("0.4.1", False), ("1.0", False)],
)
def test_min_version_check(make_workspace, required, ok):
    manifest = {"elc_min_version": required, "services": {}}
    if ok:
        make_workspace(manifest)
    else:
        with pytest.raises(ConfigError):
            make_workspace(manifest)


def test_service_variables_are_rendered_in_order(make_workspace):
    ws = make_workspace(
        {
            "name": "ensi",
            "variables": {"APPS": "{{ WORKSPACE_PATH }}/apps"},
            "services": {
                "api": {
                    "path": "{{ APPS }}/api",
                    "compose_file": "{{ SVC_PATH }}/docker/compose.yml",
                    "variables": {"DB_HOST": "{{ APP_NAME }}-db"},
                }
            },
        }
    )
    variables = ws.service_variables("api")
    root = str(ws.root_path)

    assert list(variables) == [
        "WORKSPACE_PATH",
        "WORKSPACE_NAME",
        "APPS",
        "APP_NAME",
        "SVC_PATH",
        "COMPOSE_FILE",
        "DB_HOST",
    ]
    assert variables["WORKSPACE_NAME"] == "ensi"
    assert variables["SVC_PATH"] == f"{root}/apps/api"
    assert variables["COMPOSE_FILE"] == f"{root}/apps/api/docker/compose.yml"
    assert variables["DB_HOST"] == "api-db"


def test_relative_compose_file_is_under_service_path(make_workspace):
    ws = make_workspace({"services": {"api": {"path": "apps/api"}}})
    runtime = ws.service_runtime("api")
    assert runtime.compose_file == runtime.path / "docker-compose.yml"
    assert runtime.path == ws.root_path / "apps" / "api"


def test_undefined_variable_raises_config_error(make_workspace):
    ws = make_workspace({"services": {"api": {"path": "{{ NOPE }}/api"}}})
    with pytest.raises(ConfigError):
        ws.service_variables("api")


def test_workspace_name_defaults_to_directory(make_workspace):
    ws = make_workspace({"services": {}})
    assert ws.name == "ws"


def test_module_exec_path_uses_host_service_variables(make_workspace):
    ws = make_workspace(
        {
            "services": {"api": {"path": "api", "variables": {"APP_DIR": "/app"}}},
            "modules": {
                "api-cli": {"hosted_in": "api", "exec_path": "{{ APP_DIR }}/bin"}
            },
        }
    )
    assert ws.module_exec_path("api-cli") == "/app/bin"
    assert ws.module_path("api-cli") is None


def test_unknown_names_raise_not_found(make_workspace):
    ws = make_workspace({"services": {"api": {"path": "api"}}})
    with pytest.raises(NotFoundError):
        ws.get_service("web")
    with pytest.raises(NotFoundError):
        ws.get_module("cli")
