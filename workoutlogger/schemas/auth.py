from marshmallow import EXCLUDE, fields, validate
from workoutlogger.extensions import ma


class CredentialsSchema(ma.Schema):
    """Body of ``/auth/login`` and ``/auth/register``."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=150))
    password = fields.String(required=True, validate=validate.Length(min=1))


class GuestLoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    guest_id = fields.String(data_key="guestId", required=True, validate=validate.Length(min=1, max=100))


class TokenSchema(ma.Schema):
    token = fields.String(required=True)


credentials_schema = CredentialsSchema()
guest_login_schema = GuestLoginSchema()
token_schema = TokenSchema()
