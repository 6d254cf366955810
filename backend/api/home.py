from litestar import Controller, MediaType, get


GREETING = "Hello World! This is the customer data API."


class HomeController(Controller):
    path = "/"
    tags = ["health"]

    @get(media_type=MediaType.TEXT)
    async def home(self) -> str:
        return GREETING
