from .bot import DMBot
