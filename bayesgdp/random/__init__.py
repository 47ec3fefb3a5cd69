from .random import BasicRandom
