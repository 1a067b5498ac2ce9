"""
Exceptions métier de la boutique.
Les services lèvent ces exceptions; les vues les traduisent en HTTPException
(ou en contrat {"error": ...} pour la création d'intention de paiement).
"""


class StorefrontError(Exception):
    """Base des erreurs métier (message destiné à l'utilisateur)."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class PaymentConfigurationError(StorefrontError):
    status_code = 500


class EmptyCartError(StorefrontError):
    pass


class PaymentGatewayError(StorefrontError):
    pass


class PaymentNotConfirmedError(StorefrontError):
    pass


class OrderNotFoundError(StorefrontError):
    status_code = 404


class OrderAccessDeniedError(StorefrontError):
    status_code = 403


class InvalidStatusTransitionError(StorefrontError):
    status_code = 409
