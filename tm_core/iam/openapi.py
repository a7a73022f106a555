from drf_spectacular.extensions import OpenApiAuthenticationExtension


class IdentityProviderJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "tm_core.iam.auth.IdentityProviderJWTAuthentication"
    name = "IdentityProviderJWT"

    def get_security_definition(self, auto_schema):
        # Documented as Bearer JWT; the provider's session cookie is accepted too.
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "Identity provider session token via `Authorization: Bearer <token>` "
                "or via the provider session cookie (__session)."
            ),
        }
