from registration_api.models.registration import Registration, RegistrationCandidate

__all__ = ["Registration", "RegistrationCandidate"]
