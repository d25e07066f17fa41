import asyncio
import nodriver
from nodriverfetch import ResourceFetcher

PAGE = "https://example.com"
RESOURCE = "https://example.com/favicon.ico"

async def main():
    browser = await nodriver.start(headless=True)
    tab = await browser.get(PAGE)
    fetcher = ResourceFetcher.from_tab(tab)
    fetcher.enable()
    result = await fetcher.fetch_resource(RESOURCE)
    print(f"{result.url}: {len(result.contents)} bytes (status={result.status})")
    browser.stop()

if __name__ == "__main__":
    asyncio.run(main())
