from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Flight Provider
    flight_provider: str = "amadeus"   # "amadeus" | "sabre"
    mock_mode: bool = False            # True = solo dati demo, nessuna chiamata reale

    amadeus_client_id: str = ""
    amadeus_client_secret: str = ""
    amadeus_base_url: str = "https://test.api.amadeus.com"

    sabre_client_id: str = ""
    sabre_client_secret: str = ""
    sabre_base_url: str = "https://api.test.sabre.com"
    sabre_pcc: str = "IPCC"

    # Search
    currency: str = "INR"
    max_results: int = 20
    auth_timeout_seconds: float = 15
    search_timeout_seconds: float = 25

    # App
    app_env: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


# Istanza globale usata in tutto il progetto
settings = Settings()
