"""Console script wiring."""

from xpledger import main


class TestRunEntrypoint:
    """The ``xpledger`` script hands the app to uvicorn."""

    def test_serves_app_with_configured_bind(self, monkeypatch):
        captured = {}
        monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: captured.update(app=app, **kwargs))

        main.run()

        assert captured["app"] == "xpledger.main:app"
        assert captured["host"] == "0.0.0.0"
        assert captured["port"] == 8000
        assert captured["log_config"] is None
