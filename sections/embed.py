"""
sections/embed.py
-----------------
'Embed' section: iframe code for the parish website.
"""

import streamlit as st

from utils.embed import build_embed_code, is_local_url


def render():
    st.title("Embed on Parish Website")
    st.markdown("""
    To display this dashboard on the parish website, copy the code below and
    paste it into an **HTML Block** or **Code Widget** on your CMS
    (WordPress, Wix, etc).
    """)

    app_url = st.text_input("Dashboard URL", value="http://localhost:8501/")
    st.code(build_embed_code(app_url), language="html")

    if is_local_url(app_url):
        st.info(
            "Deploy the dashboard to a public URL before embedding. "
            "If you embed a localhost link, visitors will not see the report."
        )
