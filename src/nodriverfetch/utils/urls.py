import urlcanon

def fix_url(url: str):
    """make the url more like how chrome would make it

    :param url: raw url.
    :return: fixed url
    :rtype: str
    """
    return urlcanon.google.canonicalize(url).__str__()


def same_url(a: str, b: str) -> bool:
    """compare two urls the way chrome would report them."""
    return a == b or fix_url(a) == fix_url(b)
