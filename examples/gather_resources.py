import asyncio
import nodriver
from nodriverfetch import FetchError, GatherContext, ResourceFetcher, ResourceGatherer

URLS = [
    "https://example.com/",
    "https://example.com/does-not-exist.js",
]

async def main():
    browser = await nodriver.start(headless=True)
    tab = await browser.get("https://example.com")
    fetcher = ResourceFetcher.from_tab(tab)
    context = GatherContext(session=fetcher.session, fetcher=fetcher, url=tab.url)
    artifact = await ResourceGatherer(URLS).after_pass(context)
    for url, value in artifact.items():
        if isinstance(value, FetchError):
            print(f"{url}: failed ({value})")
        else:
            print(f"{url}: {len(value.contents)} bytes")
    browser.stop()

if __name__ == "__main__":
    asyncio.run(main())
