import streamlit as st

from docfill.ui import render_form_page

st.set_page_config(page_title="Document Filler", layout="wide")

render_form_page()
