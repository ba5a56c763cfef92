import logging
import sys

# create logger shared by all transformation modules
logger = logging.getLogger("ugbio_variant_transform")
logger.setLevel(logging.INFO)

# create formatter
formatter = logging.Formatter("%(asctime)s - %(module)s - %(levelname)s - %(message)s")

# create console handler, the level is controlled by the logger (see --verbosity)
ch = logging.StreamHandler(stream=sys.stderr)
ch.setLevel(logging.DEBUG)
ch.setFormatter(formatter)
logger.addHandler(ch)
