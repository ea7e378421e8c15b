from linkvault.core.logging import get_logger
from linkvault.core.settings import Settings
from linkvault.models.contracts import PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.processing_strategies.html_strategy import GenericArticleStrategy
from linkvault.processing_strategies.instagram_strategy import InstagramResolverStrategy
from linkvault.processing_strategies.linkedin_strategy import LinkedInResolverStrategy
from linkvault.processing_strategies.reddit_strategy import RedditResolverStrategy
from linkvault.processing_strategies.tiktok_strategy import TikTokResolverStrategy
from linkvault.processing_strategies.twitter_strategy import TwitterResolverStrategy
from linkvault.processing_strategies.youtube_strategy import YouTubeResolverStrategy
from linkvault.services.http import HttpService, get_http_service
from linkvault.services.platform_detection import detect_platform
from linkvault.utils.url_utils import normalize_url

logger = get_logger(__name__)


class ContentExtractor:
    """Extraction façade: canonicalize, classify, then dispatch to one resolver."""

    def __init__(self, http: HttpService | None = None, settings: Settings | None = None):
        self.http = http or get_http_service()
        self.settings = settings or self.http.settings
        self.strategies: dict[PlatformKind, MediaResolverStrategy] = {}
        self._initialize_default_strategies()

    def _initialize_default_strategies(self):
        """Initialize with default strategies."""
        for strategy_class in (
            TwitterResolverStrategy,
            InstagramResolverStrategy,
            LinkedInResolverStrategy,
            TikTokResolverStrategy,
            YouTubeResolverStrategy,
            RedditResolverStrategy,
            GenericArticleStrategy,
        ):
            self.register(strategy_class(self.http, self.settings))

    def register(self, strategy: MediaResolverStrategy):
        """Register a strategy, replacing any earlier one for the same platform."""
        self.strategies[strategy.platform] = strategy
        logger.debug("Registered strategy: %s", strategy.__class__.__name__)

    def get_strategy(self, platform: PlatformKind) -> MediaResolverStrategy:
        strategy = self.strategies.get(platform)
        if strategy is None:
            logger.warning("No strategy for platform %s; using generic", platform)
            return self.strategies[PlatformKind.GENERIC]
        return strategy

    def list_strategies(self) -> list[str]:
        """List all registered strategy names."""
        return [s.__class__.__name__ for s in self.strategies.values()]

    async def extract(self, url: str, platform: PlatformKind | None = None) -> ExtractedContent:
        """
        Resolve ``url`` with the resolver for its platform family.

        Args:
            url: Submitted URL, canonicalized here before dispatch.
            platform: Override for the classified platform.

        Returns:
            The resolver's ``ExtractedContent``.

        Raises:
            ExtractionError: the resolver could not obtain a mandatory field.
        """
        canonical = normalize_url(url)
        kind = platform or detect_platform(canonical)
        strategy = self.get_strategy(kind)
        logger.info(
            "Extracting %s with %s",
            canonical,
            strategy.__class__.__name__,
            extra={"component": "content_extractor", "operation": "extract", "platform": kind},
        )
        return await strategy.resolve(canonical)


# Global extractor instance
_extractor = None


def get_content_extractor() -> ContentExtractor:
    """Get the global content extractor."""
    global _extractor
    if _extractor is None:
        _extractor = ContentExtractor()
    return _extractor
