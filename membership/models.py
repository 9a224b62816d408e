from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime
from membership import db

MEMBER_STATUSES = ('pending', 'approved', 'rejected')
REVIEWED_STATUSES = ('approved', 'rejected')


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(20), default='admin')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


class Member(db.Model):
    id = db.Column(db.String(32), primary_key=True)
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(30), nullable=False)
    birth_date = db.Column(db.Date)
    birth_place = db.Column(db.String(150), default='')
    id_number = db.Column(db.String(50), unique=True)  # NULL when not provided
    activity = db.Column(db.String(150), default='')
    photo = db.Column(db.String(200))  # e.g. /uploads/member-<uuid>.jpg
    qr_code = db.Column(db.String(200))  # e.g. /qrcodes/<id>.png
    status = db.Column(db.String(20), nullable=False, default='pending')
    approved_by = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'))
    approved_at = db.Column(db.DateTime)
    member_id = db.Column(db.String(20), unique=True, nullable=False)  # Format: MEM-YYYY-NNNNNN
    issued_at = db.Column(db.DateTime, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_member_status',
        ),
    )

    reviewer = db.relationship('User', foreign_keys=[approved_by])

    def to_dict(self):
        """Wire shape of a member; optional fields are always present."""
        return {
            'id': self.id,
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'birthDate': self.birth_date.isoformat() if self.birth_date else None,
            'birthPlace': self.birth_place or '',
            'idNumber': self.id_number or '',
            'activity': self.activity or '',
            'photo': self.photo or None,
            'qrCode': self.qr_code or None,
            'status': self.status,
            'approvedBy': self.approved_by,
            'approvedAt': _iso(self.approved_at),
            'memberId': self.member_id,
            'issuedAt': _iso(self.issued_at),
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def to_public_dict(self):
        """Fields shown on the public verification page"""
        return {
            'fullName': self.full_name,
            'memberId': self.member_id,
            'status': self.status,
            'activity': self.activity or '',
            'photo': self.photo or None,
            'issuedAt': _iso(self.issued_at),
        }

    def __repr__(self):
        return f'<Member {self.member_id} {self.email}>'


def _iso(value):
    return value.isoformat() if value else None
