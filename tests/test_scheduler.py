from api import scheduler as scheduler_module
from api.scheduler import cleanup_tokens_job, shutdown_scheduler, start_scheduler
from models import storage
from models.refresh_token import RefreshToken


def test_cleanup_job_sweeps_revoked_tokens(app):
    with app.app_context():
        manager = app.extensions["session_manager"]
        result = manager.register("a@x.com", "Abcd1234", "Ada", "Lovelace")
        manager.logout(result.tokens.refresh_token)

    cleanup_tokens_job(app)

    with app.app_context():
        assert storage.count(RefreshToken) == 0


def test_cleanup_job_logs_and_swallows_failures(app, monkeypatch, caplog):
    def boom():
        raise RuntimeError("database is gone")

    monkeypatch.setattr(app.extensions["session_manager"], "cleanup_expired_tokens", boom)

    cleanup_tokens_job(app)

    assert "Refresh token cleanup failed" in caplog.text


def test_start_and_shutdown_scheduler(app):
    sched = start_scheduler(app, 5)
    try:
        assert sched.get_job("refresh_token_cleanup") is not None
        assert start_scheduler(app, 5) is sched
    finally:
        shutdown_scheduler()

    assert scheduler_module.scheduler is None
