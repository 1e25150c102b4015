"""Prometheus metrics for Tessera.

Provides counters for placeholder resolution outcomes, decryption
attempts, and provider reloads.
"""

from prometheus_client import Counter

# Placeholder metrics
PLACEHOLDER_RESOLUTIONS = Counter(
    "tessera_placeholder_resolutions_total",
    "Total number of placeholder tokens resolved, by outcome",
    labelnames=["outcome"],
)

# Encryption metrics
DECRYPTIONS = Counter(
    "tessera_decryptions_total",
    "Total number of cipher-marked values decrypted, by outcome",
    labelnames=["outcome"],
)

# Provider metrics
PROVIDER_RELOADS = Counter(
    "tessera_provider_reloads_total",
    "Total number of provider snapshot swaps triggered by reload signals",
)

