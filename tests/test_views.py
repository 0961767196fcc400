# tests/test_views.py
from app.config import Settings
from app.errors import DatastoreUnavailable


def test_page_lists_contacts(client):
    client.post("/contacts", json={"name": "Page Person", "email": "page@example.com"})
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Page Person" in r.text
    assert "page@example.com" in r.text


def test_page_escapes_contact_fields(client):
    client.post("/contacts", json={"name": "<script>x</script>", "email": "xss@example.com"})
    r = client.get("/")
    assert "<script>x</script>" not in r.text
    assert "&lt;script&gt;x&lt;/script&gt;" in r.text


def test_page_renders_when_datastore_down(fake_client_factory):
    r = fake_client_factory(error=DatastoreUnavailable("down")).get("/")
    assert r.status_code == 200
    assert "Failed to fetch contacts" in r.text


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    s = Settings(_env_file=None)
    assert s.DATABASE_URL == "sqlite:///./other.db"
    assert s.cors_origins == ["http://a.test", "http://b.test"]
