# src/calamine/extraction/bias_tables.py
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Tag bias contributed once to the element itself
INTRINSIC_BIAS: Dict[str, float] = {
    "article": 200, "content": 200, "div": 200,
    "main": 100,
    "section": 50,
    "blockquote": 10, "code": 10, "figcaption": 10, "figure": 10, "ilayer": 10,
    "layer": 10, "p": 10, "pre": 10, "ruby": 10, "summary": 10,
    "address": -5, "dd": -5, "dt": -5, "small": -5, "sub": -5, "sup": -5, "th": -5,
    **{h: -5 for h in HEADINGS},
    "form": -20,
    "li": -50, "ol": -50, "ul": -50,
    "aside": -100, "font": -100, "footer": -100, "header": -100, "nav": -100,
    "table": -100, "tbody": -100, "tfoot": -100, "thead": -100,
    "a": -500, "tr": -500,
}

# Child tag bias summed into the parent, direct element children only
ANCESTOR_BIAS: Dict[str, float] = {
    "p": 100,
    "blockquote": 20, "figure": 20,
    **{h: 10 for h in HEADINGS},
    "pre": 10,
    "a": -5, "hr": -5, "li": -5,
    "ol": -20, "ul": -20,
    "div": -50,
}

# Added once to the parent of each qualifying element not sitting directly in body/root
UPWARD_BIAS: Dict[str, float] = {
    "p": 5,
    "blockquote": 3,
    "code": 2, "pre": 2, "sub": 2, "sup": 2, "time": 2,
    **{h: 1 for h in HEADINGS},
    "b": 1, "em": 1, "i": 1, "span": 1, "strong": 1,
    "a": -1,
    "li": -3,
    "ol": -5, "ul": -5,
}

ATTRIBUTE_BIAS: Dict[str, float] = {
    "about": -35, "ad": -100, "ads": -50, "advert": -200, "artext1": 100,
    "articles": 100, "articlecontent": 1000, "articlecontentbox": 200,
    "articleheadings": -50, "articlesection": 200, "articlesections": 200,
    "attachment": 20, "author": 20, "block": -5, "blog": 20, "blogpost": 500,
    "blogposting": 500, "body": 100, "bodytd": 50, "bookmarking": -100,
    "bottom": -100, "brand": -50, "breadcrumbs": -20, "button": -100,
    "byline": 20, "caption": 10, "carousel": 30, "cmt": -100, "cmmt": -100,
    "colophon": -100, "column": 10, "combx": -20, "comic": 75, "comment": -500,
    "comments": -300, "commercial": -500, "community": -100,
    "complementary": -100, "component": -50, "contact": -50, "content": 100,
    "contentpane": 200, "contenttools": -50, "contributors": -50, "credit": -50,
    "date": -50, "dcsimg": -100, "dropdown": -100, "email": -100, "entry": 100,
    "excerpt": 20, "facebook": -100, "featured": 20, "fn": -30, "foot": -100,
    "footer": -200, "footnote": -150, "ftr": -100, "ftrpanel": -100,
    "google": -50, "gutter": -300, "guttered": -100, "head": -50,
    "header": -100, "heading": -50, "hentry": 150, "hnews": 200, "inset": -50,
    "insta": -100, "left": -75, "legende": -50, "license": -100, "like": -100,
    "link": -100, "links": -100, "logo": -50, "main": 50, "mainbodyarea": 100,
    "maincolumn": 50, "mainnav": -500, "mainnavigation": -500, "masthead": -30,
    "media": -100, "mediaarticlerelated": -50, "menu": -200,
    "menucontainer": -300, "meta": -50, "most": -50, "nav": -200,
    "navbar": -100, "navigation": -100, "navimg": -100, "newsarticle": 500,
    "newscontent": 500, "newsletter": -100, "next": -300, "nfarticle": 500,
    "page": 50, "pagetools": -50, "parse": -50, "pinnion": 50, "popular": -50,
    "popup": -100, "post": 150, "power": -100, "prev": -300, "print": -50,
    "promo": -200, "promotions": -200, "ranked": -100, "reading": 100,
    "recap": -100, "recreading": -100, "rel": -50, "relate": -300,
    "related": -300, "relposts": -300, "replies": -100, "reply": -50,
    "retweet": -50, "right": -100, "rightcolumn": -100, "rightrail": -100,
    "scroll": -50, "share": -200, "sharebar": -200, "shop": -200,
    "shout": -200, "shoutbox": -200, "side": -200, "sig": -50, "signup": -100,
    "snippet": 50, "social": -200, "socialnetworking": -250,
    "socialtools": -200, "source": -50, "sponsor": -200, "story": 100,
    "storycontent": 500, "storydiv": 100, "storynav": -100, "storytext": 200,
    "storytopbar": -50, "storywrap": 50, "strycaptiontxt": -50,
    "stryhghlght": -50, "strylftcntnt": -50, "stryspcvbx": -50,
    "subscribe": -50, "summary": 50, "tabs": -100, "tag": -100,
    "tagcloud": -100, "tags": -100, "teaser": -100, "text": 20, "this": -50,
    "time": -30, "timestamp": -50, "title": -50, "tool": -200,
    "topheader": -300, "toptabs": -200, "twitter": -200, "txt": 50,
    "utility": -50, "vcard": -50, "week": -100, "welcome": -50, "widg": -200,
    "widget": -200, "wnstorybody": 1000, "zone": -50,
}

ATTRIBUTE_BIAS_TAGS = frozenset({
    "a", "aside", "div", "dl", "figure", "h1", "h2", "h3", "h4", "ol", "p",
    "section", "span", "ul",
})

LIST_CONTAINER_TAGS = frozenset({"li", "ol", "ul", "dd", "dl", "dt"})
LANDMARK_TAGS = frozenset({"aside", "header", "footer", "nav", "menu", "menuitem"})

SCHEMA_ITEM_TYPES = (
    "Article", "Blog", "BlogPost", "BlogPosting", "NewsArticle",
    "ScholarlyArticle", "TechArticle", "WebPage",
)

# Ordered by confidence: the first selector matching exactly one element wins
DEFAULT_SIGNATURES: Tuple[str, ...] = (
    "article",
    ".hentry",
    ".entry-content",
    "#article",
    ".articleText",
    ".articleBody",
    "#articleBody",
    ".article_body",
    ".articleContent",
    ".full-article",
    '[itemprop="articleBody"]',
    '[role="article"]',
    *(f'[itemtype="http://schema.org/{t}"]' for t in SCHEMA_ITEM_TYPES),
    "#WNStoryBody",
)


class ImageWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    area_coefficient: float = 0.0015
    area_cap: int = 100000
    alt_bonus: float = 20.0
    title_bonus: float = 30.0
    caption_bonus: float = 100.0
    empty_caption_bonus: float = 50.0
    carousel_penalty: float = -50.0


class BiasTables(BaseModel):
    """
    Immutable weight tables consumed by the feature extractors.

    The defaults are empirical; callers may pass an adjusted copy per
    invocation, e.g. `BiasTables().model_copy(update={...})`.
    """
    model_config = ConfigDict(frozen=True)

    intrinsic: Dict[str, float] = Field(default_factory=lambda: dict(INTRINSIC_BIAS))
    ancestor: Dict[str, float] = Field(default_factory=lambda: dict(ANCESTOR_BIAS))
    upward: Dict[str, float] = Field(default_factory=lambda: dict(UPWARD_BIAS))

    list_container_tags: FrozenSet[str] = LIST_CONTAINER_TAGS
    list_descendant_penalty: float = -200.0
    landmark_tags: FrozenSet[str] = LANDMARK_TAGS
    landmark_descendant_penalty: float = -500.0

    text_coefficient: float = 0.25
    anchor_coefficient: float = 0.7
    text_bias_cap: Optional[float] = 4000.0

    image: ImageWeights = Field(default_factory=ImageWeights)

    attribute_tokens: Dict[str, float] = Field(default_factory=lambda: dict(ATTRIBUTE_BIAS))
    attribute_bias_tags: FrozenSet[str] = ATTRIBUTE_BIAS_TAGS
