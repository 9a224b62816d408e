"""
Membership registry - test configuration and fixtures
"""
import io
import os

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from membership import create_app, db
from membership.media import PHOTO_DIR, QR_DIR
from membership.models import User


@pytest.fixture
def app(tmp_path):
    """App backed by a throwaway SQLite file and media folder"""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key-for-testing-only',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'MEDIA_ROOT': str(tmp_path / 'media'),
        'BASE_URL': 'http://testserver',
        'SHOW_ERROR_DETAIL': False,
    })

    with app.app_context():
        admin = User(username='admin', role='admin')
        admin.set_password('admin123')
        db.session.add(admin)
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post('/admin/login', json={'username': 'admin', 'password': 'admin123'})
    assert response.status_code == 200
    return client


@pytest.fixture
def png_bytes():
    """Real PNG image data"""
    def make(size=(8, 8), color=(200, 30, 30)):
        buffer = io.BytesIO()
        Image.new('RGB', size, color).save(buffer, 'PNG')
        return buffer.getvalue()
    return make


@pytest.fixture
def upload(png_bytes):
    """Werkzeug upload as the registration route receives it"""
    def make(data=None, filename='photo.png', content_type='image/png'):
        if data is None:
            data = png_bytes()
        return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)
    return make


@pytest.fixture
def media_files(app):
    """Names of stored files per media folder"""
    def list_files():
        root = app.config['MEDIA_ROOT']
        return {
            folder: sorted(os.listdir(os.path.join(root, folder)))
            for folder in (PHOTO_DIR, QR_DIR)
        }
    return list_files


@pytest.fixture
def jane():
    return {'fullName': 'Jane Doe', 'email': 'jane@x.com', 'phone': '12345678'}
