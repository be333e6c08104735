import redis

from restaurant_pos.domain.cart import Cart
from restaurant_pos.domain.errors import CartNotFoundError
from restaurant_pos.utils.retry import redis_retry
from restaurant_pos.utils.settings import REDIS_URL, CART_TTL_SECONDS
from restaurant_pos.utils.logging import get_logger

logger = get_logger(__name__)


class CartStore:
    """
    -keeps terminal carts in redis as json
    -every save extends the TTL, an abandoned cart expires on its own
    """

    def __init__(self, client=None, url: str | None = None, ttl: int = CART_TTL_SECONDS):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(cart_id: str) -> str:
        return f"cart:{cart_id}"

    @redis_retry()
    def load(self, cart_id: str) -> Cart:
        raw = self.redis.get(self._key(cart_id))
        if raw is None:
            raise CartNotFoundError(cart_id)
        return Cart.model_validate_json(raw)

    @redis_retry()
    def save(self, cart: Cart) -> Cart:
        #SET cart:<id> "<json>" EX 900
        self.redis.set(name=self._key(cart.id), value=cart.model_dump_json(), ex=self.ttl)
        return cart

    @redis_retry()
    def delete(self, cart_id: str) -> bool:
        logger.info(f"Dropping cart {cart_id}")
        return bool(self.redis.delete(self._key(cart_id)))
