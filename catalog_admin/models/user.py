"""
Modèle User - Utilisateurs avec rôles
"""
from werkzeug.security import generate_password_hash, check_password_hash

from catalog_admin.extensions import db
from catalog_admin.core.audit_mixin import TimestampMixin, register_audit_listeners, utcnow
from catalog_admin.core.utils import generate_id


class User(db.Model, TimestampMixin):
    """
    Modèle Utilisateur.
    Rôles: user, admin
    """
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    name = db.Column(db.String(200), nullable=True)
    image = db.Column(db.String(500), nullable=True)
    role = db.Column(db.String(50), nullable=False, default='user')
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f'<User {self.email}>'

    def set_password(self, password):
        """Hash et stocke le mot de passe"""
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        """Vérifie le mot de passe"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Met à jour la date de dernière connexion"""
        self.last_login = utcnow()


# Enregistrer les listeners d'audit
register_audit_listeners(User)
