import pytest

from elc_src.errors import CyclicDependencyError, DelegateError, NotFoundError
from elc_src.manager import LifecycleManager

MANIFEST = {
    "services": {
        "web": {"path": "apps/web", "dependencies": {"api": ["default"]}},
        "worker": {
            "path": "apps/worker",
            "dependencies": {"db": ["default"], "mailer": ["full"]},
        },
        "api": {"path": "apps/api", "dependencies": {"db": ["default"]}},
        "db": {"path": "infra/db"},
        "mailer": {"path": "infra/mailer"},
    },
    "modules": {
        "api-cli": {"hosted_in": "api", "exec_path": "/app/bin"},
    },
}


@pytest.fixture
def manager(make_workspace, engine, tmp_path):
    ws = make_workspace(MANIFEST, cwd=tmp_path / "ws" / "apps" / "worker" / "src")
    return LifecycleManager(ws, engine)


def test_start_brings_up_dependencies_first(manager, engine):
    manager.start(["web"])
    assert engine.actions() == [("up", "db"), ("up", "api"), ("up", "web")]


def test_start_twice_is_a_no_op(manager, engine):
    manager.start(["web"])
    engine.calls.clear()

    manager.start(["web"])

    assert engine.actions() == []


def test_start_with_mode(manager, engine):
    manager.start(["worker"], mode="full")
    assert engine.actions() == [("up", "mailer"), ("up", "worker")]


def test_start_force_restarts_running_dependencies(manager, engine):
    engine.running = {"db", "api"}
    manager.start(["web"], force=True)
    assert engine.actions() == [
        ("restart", "db"),
        ("restart", "api"),
        ("up", "web"),
    ]


def test_start_defaults_to_service_of_cwd(manager, engine):
    manager.start()
    assert engine.actions() == [("up", "db"), ("up", "worker")]


def test_start_several_names_in_order(manager, engine):
    manager.start(["worker", "web"])
    assert engine.actions() == [
        ("up", "db"),
        ("up", "worker"),
        ("up", "api"),
        ("up", "web"),
    ]


def test_start_unknown_service(manager, engine):
    with pytest.raises(NotFoundError):
        manager.start(["nope"])
    assert engine.calls == []


def test_failure_aborts_remaining_plan(manager, engine):
    engine.fail_on = {("up", "api")}
    with pytest.raises(DelegateError):
        manager.start(["web"])
    assert engine.actions() == [("up", "db"), ("up", "api")]
    assert engine.running == {"db"}


def test_cycle_aborts_before_any_engine_call(make_workspace, engine):
    ws = make_workspace(
        {
            "services": {
                "a": {"path": "a", "dependencies": {"b": ["default"]}},
                "b": {"path": "b", "dependencies": {"a": ["default"]}},
            }
        }
    )
    with pytest.raises(CyclicDependencyError):
        LifecycleManager(ws, engine).start(["a"])
    assert engine.actions() == []


def test_stop_all_uses_declaration_order(make_workspace, engine):
    ws = make_workspace(
        {
            "services": {
                "web": {"path": "web", "dependencies": {"db": ["default"]}},
                "worker": {"path": "worker", "dependencies": {"db": ["default"]}},
                "db": {"path": "db"},
            }
        }
    )
    LifecycleManager(ws, engine).stop(all_=True)
    assert engine.actions() == [("stop", "web"), ("stop", "worker"), ("stop", "db")]


def test_stop_does_not_touch_dependencies(manager, engine):
    engine.running = {"db", "api", "web"}
    manager.stop(["web"])
    assert engine.actions() == [("stop", "web")]


def test_stop_defaults_to_service_of_cwd(manager, engine):
    manager.stop()
    assert engine.actions() == [("stop", "worker")]


def test_stop_aborts_on_first_failure(manager, engine):
    engine.fail_on = {("stop", "api")}
    with pytest.raises(DelegateError):
        manager.stop(["web", "api", "db"])
    assert engine.actions() == [("stop", "web"), ("stop", "api")]


def test_destroy_all(manager, engine):
    manager.destroy(all_=True)
    assert engine.actions() == [
        ("destroy", "web"),
        ("destroy", "worker"),
        ("destroy", "api"),
        ("destroy", "db"),
        ("destroy", "mailer"),
    ]


def test_restart(manager, engine):
    engine.running = {"db", "api"}
    manager.restart(["api"])
    assert engine.actions() == [("restart", "api")]


def test_restart_hard(manager, engine):
    engine.running = {"db", "api"}
    manager.restart(["api"], hard=True)
    assert engine.actions() == [("destroy", "api"), ("up", "api")]


def test_compose_uses_resolved_service(manager, engine):
    engine.returncode = 3
    assert manager.compose(["ps", "-a"]) == 3
    assert engine.calls == [("run_raw", "worker", ["ps", "-a"])]


def test_compose_with_explicit_service_skips_planning(manager, engine):
    manager.compose(["logs"], svc_name="web")
    assert engine.calls == [("run_raw", "web", ["logs"])]


def test_exec_module_runs_in_hosting_service(manager, engine):
    engine.running = {"db", "api"}
    assert manager.exec(["ls"], target="api-cli", uid=1000) == 0
    assert engine.calls == [("exec", "api", "/app/bin", 1000, ["ls"])]


def test_exec_starts_service_first(manager, engine):
    manager.exec(["ls"], target="api-cli")
    assert engine.calls == [
        ("up", "db"),
        ("up", "api"),
        ("exec", "api", "/app/bin", None, ["ls"]),
    ]


def test_exec_force_keeps_running_target(manager, engine):
    engine.running = {"db", "api"}
    manager.exec(["ls"], target="api", force=True)
    assert engine.calls == [
        ("restart", "db"),
        ("exec", "api", None, None, ["ls"]),
    ]


def test_exec_defaults_to_service_of_cwd(manager, engine):
    engine.running = {"db", "worker"}
    engine.returncode = 2
    assert manager.exec(["bash"]) == 2
    assert engine.calls == [("exec", "worker", None, None, ["bash"])]


def test_vars(manager):
    variables = manager.vars("api")
    assert variables["APP_NAME"] == "api"
    assert variables["SVC_PATH"].endswith("apps/api")
