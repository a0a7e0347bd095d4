from edgestack.config import configure_logging
from edgestack.runtime import get_default_cache, make_handler
from edgestack.server.bootstrap import bootstrap

configure_logging()

# Lambda entry: the application is built on the first invocation of each
# execution context and reused while the context stays warm.
handler = make_handler(get_default_cache(), bootstrap)
