"""Default override rules.

Avoid adding override rules if you can: whatever the signature database
identifies is correct in almost every case. Fallback rules are only
consulted when the database returns the default browser.

Order matters in every list; the first matching rule wins.
"""

from uainfo.classification.overrides import ExactRule, OverrideRuleSet, RegexRule

# Flag sets shared by most rules
BROWSER = {"isbanned": "0", "ismobiledevice": "0", "issyndicationreader": "0", "crawler": "0"}
MOBILE_BROWSER = {**BROWSER, "ismobiledevice": "1"}
CRAWLER = {**BROWSER, "crawler": "1"}
BANNED_CRAWLER = {**CRAWLER, "isbanned": "1"}
MOBILE_CRAWLER = {**CRAWLER, "ismobiledevice": "1"}

# Browser version taken from the first two capture groups
VERSION_FROM_GROUPS = {"version": "%1$s.%2$s", "majorver": "%1$s", "minorver": "%2$s"}


OVERRIDE_EXACT_RULES: list[ExactRule] = []

OVERRIDE_REGEX_RULES: list[RegexRule] = [
    RegexRule("#yacybot#", {"browser": "YaCy-Bot", **BANNED_CRAWLER}),
]

FALLBACK_REGEX_RULES: list[RegexRule] = [
    RegexRule(
        r"#^Mozilla/5\.0 \(Macintosh; Intel Mac OS X (\d+)_(\d+)_\d+\) AppleWebKit/(\d|\.)+ \(KHTML, like Gecko\)$#",
        {"browser": "Apple Mail", "platform": "MacOSX", "platform_version": "%1$s.%2$s", **CRAWLER},
    ),
    RegexRule(
        r"#^Opera/9\.80 \(Windows NT 6\.2; W(in|OW)64.*\) Presto/(\d|\.)+ Version/\d+\.(\d+)$#",
        {
            "browser": "Opera",
            "version": "12.%3$s",
            "majorver": "12",
            "minorver": "%3$s",
            "platform": "Win8",
            "platform_version": "6.2",
            "win64": "1",
            **BROWSER,
        },
    ),
    RegexRule(
        r"#^Opera/9\.80 \(Windows NT 6\.2\) Presto/(\d|\.)+ Version/\d+\.(\d+)$#",
        {
            "browser": "Opera",
            "version": "12.%2$s",
            "majorver": "12",
            "minorver": "%2$s",
            "platform": "Win8",
            "platform_version": "6.2",
            "win64": "0",
            **BROWSER,
        },
    ),
    RegexRule(
        r"#^Mozilla/5\.0 SF/(\d+)\.([\w\.]+)$#",
        {"browser": "SkipFish Security Scanner", **VERSION_FROM_GROUPS, "platform": "Linux", **CRAWLER},
    ),
    RegexRule(
        r"#Ezooms/(\d+)\.([\w\.]+)#",
        {"browser": "Ezooms", **VERSION_FROM_GROUPS, **BANNED_CRAWLER},
    ),
    RegexRule(
        r"#^check_http/v\d+\.[\w\.]+ \(nagios-plugins (\d+)\.([\w\.]+)\)$#",
        {"browser": "Nagios", **VERSION_FROM_GROUPS, "platform": "Linux", **CRAWLER},
    ),
    RegexRule(
        r"#^Mozilla/(\d+)\.(\d+) \[en\] \(X11; U; SunOS (\w+) sun4u\)$#",
        {"browser": "Netscape Navigator", **VERSION_FROM_GROUPS, "platform": "Solaris", **BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/(\d+)\.(\d+) \[en\] \(Windows NT 5\.0; U\)#",
        {"browser": "Netscape Navigator", **VERSION_FROM_GROUPS, "platform": "Win2000", **CRAWLER},
    ),
    # Private crawler of company websites
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; melog\.com .*curl\)$#",
        {"browser": "melog.com curl", "platform": "Linux", **CRAWLER},
    ),
    # Not really a crawler
    RegexRule(
        r"#Yahoo Pipes (\d+)\.(\d+)#",
        {"browser": "Yahoo Pipes (YQL)", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; WBSearchBot/(\d+)\.(\d+);#",
        {"browser": "WBSearchBot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; spbot/(\d+)\.(\d+);#",
        {"browser": "spbot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; discobot/(\d+)\.(\d+);#",
        {"browser": "discobot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#^GG PeekBot (\d+)\.(\d+) \(\s?http://gg\.pl/.*\)$#",
        {"browser": "Gadu-Gadu Bot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#Google Wireless Transcoder#",
        {"browser": "Google Wireless Transcoder", **MOBILE_BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(i(Pad|Phone);.*AppleWebKit#",
        {"browser": "Safari", "platform": "iPhone OSX", **MOBILE_BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(Linux;[^)]+Android[^)]+generic\) AppleWebKit.*Mobile Safari.*$#",
        {"browser": "Android", "platform": "Android", **MOBILE_BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(PlayBook;[^)]+RIM Tablet OS[^)]+\) AppleWebKit.*Safari.*$#",
        {"browser": "BlackBerry", "platform": "BlackBerry OS", **MOBILE_BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(SAMSUNG; SAMSUNG-GT-\w+/\w+; U; Bada/\d+\.\d+; [\w-]+\) AppleWebKit/\d+\.\d+ \(KHTML, like Gecko\) Dolfin/(\d+)\.(\d+) #",
        {"browser": "Dolfin", **VERSION_FROM_GROUPS, "platform": "Bada", **MOBILE_BROWSER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(X11; Linux x86_64\) AppleWebKit/\d+\.\d+ \(KHTML, like Gecko; Google Web Preview\) Chrome/(\d+)\.(\d+\.\d+) Safari/\d+\.\d+$#",
        {"browser": "Chrome", **VERSION_FROM_GROUPS, "platform": "Linux", **BROWSER},
    ),
    RegexRule(r"#^W3C_Unicorn#", {"browser": "W3C Validator", **BROWSER}),
    RegexRule(r"#^SearchIndexer#", {"browser": "unidentified crawler", **BANNED_CRAWLER}),
    RegexRule(r"#^Jyxobot#", {"browser": "Jyxobot", **CRAWLER}),
    RegexRule(r"#^www\.monit24\.pl-m24Bot#", {"browser": "www.monit24.pl", **CRAWLER}),
    RegexRule(r"#^WSCommand(-|_)iPhone#", {"browser": "iPhone app bot", **MOBILE_CRAWLER}),
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; Genieo/(\d+)\.(\d+) http://www\.genieo\.com/webfilter\.html\)$#",
        {"browser": "Genieo bot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(r"#^spray-can#", {"browser": "unidentified crawler", **BANNED_CRAWLER}),
    RegexRule(
        r"#^ExB Language Crawler (.*) \(\+http://www\.exb\.de/crawler\)$#",
        {"browser": "ExB Crawler", "version": "%1$s", **CRAWLER},
    ),
    RegexRule(r"#^CoralWebPrx#", {"browser": "CoralCDN bot", **BANNED_CRAWLER}),
    RegexRule(r"#checks\.panopta\.com#", {"browser": "Panopta Monitoring", **CRAWLER}),
    RegexRule(
        r"#^Microsoft Office Mobile/(\d+)\.(\d+)$#",
        {"browser": "Microsoft Office Mobile", **VERSION_FROM_GROUPS, **MOBILE_CRAWLER},
    ),
    RegexRule(
        r"#^Jakarta Commons-HttpClient/(\d+)\.(\d+)$#",
        {"browser": "Apache Jakarta", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(r"#fairshare\.cc#", {"browser": "fairshare.cc bot", **BANNED_CRAWLER}),
    RegexRule(r"#page2rss\.com#", {"browser": "page2rss.com bot", **CRAWLER}),
    RegexRule(r"#www\.abonti\.com#", {"browser": "www.abonti.com bot (suspicious)", **CRAWLER}),
    RegexRule(r"#coccoc\.com#", {"browser": "Coc Coc bot", **CRAWLER}),
    RegexRule(r"#siteexplorer\.info#", {"browser": "siteexplorer.info bot", **CRAWLER}),
    RegexRule(
        r"#^Mozilla/5\.0 \(compatible; .*Mail.RU_Bot/(\d+).(\d+)[);]#",
        {"browser": "mail.ru bot", **VERSION_FROM_GROUPS, **CRAWLER},
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(Windows NT 6\.3; (WOW|Win)64;.*Trident/7\.0;.*rv:11\.(\d+).*\) like Gecko$#",
        {
            "browser": "IE",
            "version": "11.%2$s",
            "majorver": "11",
            "minorver": "%2$s",
            "platform": "Win8.1",
            **BROWSER,
        },
    ),
    RegexRule(
        r"#^Mozilla/5\.0 \(Windows NT 6\.3;.*Trident/7\.0;.*rv[: ]11\.(\d+).*\) like Gecko$#",
        {
            "browser": "IE",
            "version": "11.%1$s",
            "majorver": "11",
            "minorver": "%1$s",
            "platform": "Win8.1",
            **BROWSER,
        },
    ),
]

FALLBACK_EXACT_RULES: list[ExactRule] = [
    ExactRule(
        "Mozilla/5.0 (compatible; OpenindexSpider; +http://openindex.io/en/webmasters/spider.html)",
        {"browser": "Openindex Spider", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/4.0 (compatible; MSIE 5.0; Windows NT; DigExt)",
        {"browser": "E-mail address crawler", **BANNED_CRAWLER},
    ),
    ExactRule(
        "Mozilla/4.0 (compatible; MSIE 5.0; Windows NT; DigExt; DTS Agent",
        {"browser": "E-mail address crawler", **BANNED_CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; SEOkicks-Robot +http://www.seokicks.de/robot.html)",
        {"browser": "SEOkicks-Robot", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; JikeSpider; +http://shoulu.jike.com/spider.html)",
        {"browser": "JikeSpider", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows NT 6.1; WOW64) AppleWebKit/534+ (KHTML, like Gecko) BingPreview/1.0b",
        {"browser": "Safari", "platform": "Win7", **BROWSER},
    ),
    ExactRule("NetSprint News", {"browser": "NetSprint News Crawler", **CRAWLER}),
    ExactRule("MLBot (www.metadatalabs.com/mlbot)", {"browser": "MLBot", **CRAWLER}),
    ExactRule(
        "Mozilla/5.0 (compatible; proximic; +http://www.proximic.com)",
        {"browser": "Proximic Bot", **CRAWLER},
    ),
    ExactRule("Mozilla/4.0 (compatible;)", {"browser": "Unknown pre-fetch bot", **CRAWLER}),
    ExactRule(
        "Mozilla/5.0(iPad; U; CPU iPhone OS 3_2 like Mac OS X; en-us) AppleWebKit/531.21.10 "
        "(KHTML, like Gecko) Version/4.0.4 Mobile/7B314 Safari/531.21.10gin_lib.cc",
        {"browser": "Safari", "version": "4.0", "majorver": "4", "platform": "iOS", **MOBILE_BROWSER},
    ),
    ExactRule(
        "Mozilla/4.0 (compatible; MSIE 8.0; Windows NT 6.2; Trident/4.0; SLCC2; .NET CLR 2.0.50727; "
        ".NET CLR 3.5.30729; .NET CLR 3.0.30729; Media Center PC 6.0)",
        {"browser": "IE", "version": "8.0", "majorver": "8", "platform": "Win8", **BROWSER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows; U; Windows NT 6.1; en-US) AppleWebKit/533.2 (KHTML, like Gecko) Chrome/6.0",
        {"browser": "fake Chrome", **BANNED_CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows; U; MSIE 9.0; WIndows NT 9.0; en-US))",
        {"browser": "fake IE", **BANNED_CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows; U; MSIE 7.0; Windows NT 6.0; el-GR)",
        {"browser": "fake IE", **BANNED_CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows; U; MSIE 7.0; Windows NT 6.0; en-US)",
        {"browser": "fake IE", **BANNED_CRAWLER},
    ),
    ExactRule("Mozilla/4.0 (compatible;MSIE 7.0;Windows NT 6.0)", {"browser": "fake IE", **BANNED_CRAWLER}),
    ExactRule(
        "# Mozilla/4.0 (compatible; MSIE 8.0; Windows NT 6.1; WOW64; Trident/4.0; SLCC2; .NET CLR 2.0.50727; "
        ".NET CLR 3.5.30729; .NET CLR 3.0.30729; Media Center PC 6.0; InfoPath.2; OfficeLiveConnector.1.3; "
        "OfficeLivePatch.0.0; MS-RTC LM 8; Zune 4.0)",
        {"browser": "fake IE", **BANNED_CRAWLER},
    ),
    ExactRule("webscraper/1.0", {"browser": "webscraper bot", **CRAWLER}),
    ExactRule(
        "Mozilla/5.0 (compatible; discoverybot/2.0; +http://discoveryengine.com/discoverybot.html)",
        {"browser": "discoverybot", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; proximic; +http://www.proximic.com/info/spider.php)",
        {"browser": "proximic bot", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; SearchmetricsBot; http://www.searchmetrics.com/en/searchmetrics-bot/)",
        {"browser": "searchmetrics bot", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; GrapeshotCrawler/2.0; +http://www.grapeshot.co.uk/crawler.php)",
        {"browser": "grapeshot bot", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (Windows; U; Windows NT 6.0; en-GB; rv:1.0; trendictionbot0.5.0; trendiction search; "
        "http://www.trendiction.de/bot; please let us know of any problems; web at trendiction.com) "
        "Gecko/20071127 Firefox/3.0.0.11",
        {"browser": "trendiction bot", **CRAWLER},
    ),
    ExactRule(
        "msnbot/0.01 (+http://search.msn.com/msnbot.htm)",
        {"browser": "msn bot", "version": "0.01", **CRAWLER},
    ),
    ExactRule(
        "Mozilla/5.0 (compatible; SISTRIX Crawler; http://crawler.sistrix.net/)",
        {"browser": "sistrix crawler", **CRAWLER},
    ),
    ExactRule("xpymep.exe", {"browser": "russian banned bot", **BANNED_CRAWLER}),
    ExactRule("statsdone.com", {"browser": "russian shady website", **BANNED_CRAWLER}),
    ExactRule("start.exe", {"browser": "something fake", **BANNED_CRAWLER}),
    ExactRule("BuiBui-Bot/1.0 (email: buibui[at]dadapro[dot]com)", {"browser": "BuiBui bot", **BANNED_CRAWLER}),
    ExactRule("sdhhd", {"browser": "fake user agent name", **BANNED_CRAWLER}),
    ExactRule("dfhdf", {"browser": "fake user agent name", **BANNED_CRAWLER}),
    ExactRule("Mozilla", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/4.0", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/4.78 [en]", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/5.0", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/5.0 (compatible)", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/5.0 (compatible", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule("Mozilla/4.0 (compatible)", {"browser": "fake generic browser", **BANNED_CRAWLER}),
    ExactRule(
        "Mozilla/4.0 (compatible; MSIE 999.1; Unknown)",
        {"browser": "fake generic browser", **BANNED_CRAWLER},
    ),
    ExactRule("Mozilla/Firefox", {"browser": "fake Firefox", **BANNED_CRAWLER}),
    ExactRule("firefox", {"browser": "fake Firefox", **BANNED_CRAWLER}),
    ExactRule("MSIE 7.0", {"browser": "fake IE", **BANNED_CRAWLER}),
    ExactRule("MSIE 8.0", {"browser": "fake IE", **BANNED_CRAWLER}),
    ExactRule("Internet Explorer", {"browser": "fake IE", **BANNED_CRAWLER}),
    ExactRule("ESTATER_SPIDER", {"browser": "real estate bad bot", **BANNED_CRAWLER}),
    ExactRule(
        "Informative string with your contact info",
        {"browser": "fake user agent name", **BANNED_CRAWLER},
    ),
    ExactRule("myinfo", {"browser": "fake user agent name", **BANNED_CRAWLER}),
    ExactRule("Ruby", {"browser": "ruby", **CRAWLER}),
    ExactRule("ruby", {"browser": "ruby", **CRAWLER}),
]


def create_default_rules() -> OverrideRuleSet:
    """Create the rule set shipped with uainfo."""
    return OverrideRuleSet(
        override_exact=list(OVERRIDE_EXACT_RULES),
        override_regex=list(OVERRIDE_REGEX_RULES),
        fallback_exact=list(FALLBACK_EXACT_RULES),
        fallback_regex=list(FALLBACK_REGEX_RULES),
    )
