"""link_checker.crawler: обход сайта и проверка ссылок."""
