from donors.pages import Flash, inject_before_body_end, not_logged_in_page, render_page


def test_plain_page_has_no_message():
    html = render_page("login.html", style="inline")
    assert 'action="/login"' in html
    assert "<span class=\"text-" not in html
    assert "alert(" not in html


def test_inline_flash_is_escaped_span():
    html = render_page("login.html", Flash(text="<b>nope</b>", color="green"), style="inline")
    assert '<span class="text-green-500 font-semibold">&lt;b&gt;nope&lt;/b&gt;</span>' in html


def test_alert_flash_injects_script_before_body_end():
    html = render_page("register.html", Flash(text="Email already exists", redirect_to="/register"), style="alert")
    script = html.index('<script>alert("Email already exists");')
    assert script < html.lower().rindex("</body>")
    assert 'window.location.href = "/register";' in html


def test_alert_text_cannot_close_script_tag():
    html = render_page("login.html", Flash(text="</script><b>x"), style="alert")
    assert "</script><b>x" not in html


def test_inject_without_body_appends():
    assert inject_before_body_end("<p>x</p>", "<i></i>") == "<p>x</p><i></i>"


def test_not_logged_in_notice():
    html = not_logged_in_page()
    assert "You are not logged in" in html
    assert "window.location.href = '/'" in html
