from domain.exceptions.currency import ConfigurationError
from infrastructure.providers.base import ProviderDescriptor
from infrastructure.providers.normalizers import NORMALIZERS

ENDPOINT_TEMPLATES: dict[str, str] = {
    "exchangerate-api": "https://open.exchangerate-api.com/v6/latest/{base}",
    "open.er-api": "https://open.er-api.com/v6/latest/{base}",
    "frankfurter": "https://api.frankfurter.app/latest?from={base}",
}


def build_providers(provider_ids: list[str]) -> list[ProviderDescriptor]:
    """Build descriptors for the given provider ids, preserving their order."""
    if not provider_ids:
        raise ConfigurationError("At least one provider must be enabled")

    providers = []
    for provider_id in provider_ids:
        if provider_id not in ENDPOINT_TEMPLATES or provider_id not in NORMALIZERS:
            raise ConfigurationError(f"Unknown provider: {provider_id}")
        providers.append(
            ProviderDescriptor(
                id=provider_id,
                endpoint_template=ENDPOINT_TEMPLATES[provider_id],
                normalize=NORMALIZERS[provider_id],
            )
        )
    return providers
