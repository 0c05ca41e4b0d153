# Routes package init
"""
NoteCache - API Routes Package
================================

Route Inventory:
    - notes.py:   POST   /write             (create a note from form fields)
                  GET    /notes             (list all notes as JSON)
                  GET    /notes/{name}      (read one note)
                  PUT    /notes/{name}      (replace one note's text)
                  DELETE /notes/{name}      (delete one note)
    - form.py:    GET    /UploadForm.html   (static HTML form)
    - health.py:  GET    /health            (service health check)

Routes stay thin: pull the input out of the request, make one NoteStore
call, shape the response. Errors are rendered by the handlers in main.py.
"""
