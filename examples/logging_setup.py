import asyncio
import logging
import nodriver
from nodriverfetch import ResourceFetcher

# nodriverfetch only logs warnings by default; raise the level to see
# strategy selection and protocol chatter
async def main():
    logging.basicConfig(level=logging.DEBUG)
    logging.getLogger("websockets").setLevel(logging.WARNING)
    browser = await nodriver.start(headless=True)
    tab = await browser.get("https://example.com")
    fetcher = ResourceFetcher.from_tab(tab)
    fetcher.enable()
    await fetcher.fetch_resource("https://example.com/")
    browser.stop()

if __name__ == "__main__":
    asyncio.run(main())
