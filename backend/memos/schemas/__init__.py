# Schemas package init
"""
Memos Backend - API Schemas
============================

Pydantic models defining the API contract, kept separate from the ORM
models. Each entity module also holds its row-to-record mapping function:

    - user.py:      user_record, user_profile, user_setting_record
    - memo.py:      memo_record (+ MemoView for the view adapter)
    - resource.py:  resource_record
    - tag.py:       tag_record
"""
