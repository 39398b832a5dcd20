"""
Ingestion layer — upstream source clients.

Submodules:
  hypixel_client  — Hypixel public API: account, profiles, profile detail,
                    skill level tables
  skycrypt_client — SkyCrypt aggregator, fallback for skills and slayers
  errors          — UpstreamUnavailable / NotFound

Credential placement (.env, gitignored):
  HYPIXEL_API_KEY  — Hypixel API key (SkyCrypt needs none)
"""
