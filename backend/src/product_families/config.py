from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "info"
    # Input catalog (brand -> products, or brand -> pre-grouped product arrays)
    catalog_path: str = "public/products.json"
    # Per-product specification attributes pulled by the fetch job
    attributes_path: str = "products_with_attributes.json"
    attribute_errors_path: str = "public/attribute_fetch_errors.json"
    snapshot_path: str = "public/products_with_variants.json"
    grouped_catalog_path: str = "public/products-grouped-by-variant.json"
    # Named vocabulary configurations from text/vocabularies.yaml
    cluster_vocabulary: str = "catalog"
    title_vocabulary: str = "family-title"
    # Remote product attribute API
    attribute_api_base: str = "http://localhost:8080/product-api/products"
    fetch_concurrency: int = 10
    fetch_retry_attempts: int = 3
    fetch_retry_delay_ms: int = 1000
    fetch_timeout_s: float = 30.0
    fetch_checkpoint_every: int = 100
    # Meilisearch for family search
    meilisearch_url: str = "http://localhost:7700"
    meilisearch_api_key: str = ""
    meilisearch_index: str = "families"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
