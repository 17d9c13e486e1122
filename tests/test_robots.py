from link_checker.crawler.robots import RobotsTxtRules


def test_empty_disallow_allows_everything():
    rules = RobotsTxtRules("User-agent: *\nDisallow:")
    assert rules.can_fetch("LinkCheckerBot/1.0", "/anything")


def test_specific_agent_group_wins():
    rules = RobotsTxtRules(
        "User-agent: *\nDisallow: /\n\nUser-agent: LinkCheckerBot\nDisallow: /private\n"
    )
    assert rules.can_fetch("LinkCheckerBot/1.0", "/public")
    assert not rules.can_fetch("LinkCheckerBot/1.0", "/private/x")
    assert not rules.can_fetch("OtherBot", "/public")


def test_longest_match_and_allow_on_tie():
    rules = RobotsTxtRules(
        "User-agent: *\nDisallow: /docs\nAllow: /docs/public\nDisallow: /tie\nAllow: /tie\n"
    )
    assert not rules.can_fetch("bot", "/docs/secret")
    assert rules.can_fetch("bot", "/docs/public/a")
    assert rules.can_fetch("bot", "/tie")


def test_wildcards():
    rules = RobotsTxtRules("User-agent: *\nDisallow: /*.pdf$\nDisallow: /tmp*/cache\n")
    assert not rules.can_fetch("bot", "/files/report.pdf")
    assert rules.can_fetch("bot", "/files/report.pdf?download=1")
    assert not rules.can_fetch("bot", "/tmp42/cache/x")


def test_no_matching_group_allows():
    rules = RobotsTxtRules("User-agent: SomeBot\nDisallow: /\n# comment only\n")
    assert rules.can_fetch("LinkCheckerBot", "/")
