"""Built-in plugin definitions.

Workflow files override these by name.
"""

EMBEDDED_WORKFLOW = """
views:
  - name: Kanban
    key: F1
    default: true
    sort: [priority, title]
    lanes:
      - name: Backlog
        filter: status=backlog
        action: status=backlog
      - name: Ready
        filter: status=ready
        action: status=ready
      - name: In Progress
        filter: status=in_progress
        action: status=in_progress
      - name: Review
        filter: status=review
        action: status=review
      - name: Done
        filter: status=done
        action: status=done

  - name: Backlog
    key: F3
    view: compact
    sort: [priority, title]
    lanes:
      - name: Backlog
        columns: 4
        filter: status=backlog
    actions:
      - key: b
        label: Ready
        action: status=ready

  - name: Recent
    key: F4
    sort: [updated:desc]
    lanes:
      - name: Recently changed
        columns: 4
        filter: updated<=7d

  - name: Roadmap
    key: F5
    sort: [priority, title]
    lanes:
      - name: Now
        filter: tag=now
        action: tags+=[now], tags-=[next, later]
      - name: Next
        filter: tag=next
        action: tags+=[next], tags-=[now, later]
      - name: Later
        filter: tag=later
        action: tags+=[later], tags-=[now, next]

  - name: Help
    key: "?"
    type: doki
    fetcher: internal
    text: |
      # tiki

      Tickets live in `.doc/tiki` as markdown files with YAML front-matter.

      ## Boards

      | Key | Action |
      |-----|--------|
      | arrows, h j k l | move the selection |
      | Tab, Shift-Tab | next or previous lane |
      | Enter | open the selected ticket |
      | Shift-Left, Shift-Right | move the ticket into the neighbouring lane |
      | n | new ticket |
      | d | delete ticket |
      | / | search |
      | v | compact or expanded cards |

      ## Everywhere

      | Key | Action |
      |-----|--------|
      | Esc | back |
      | r | reload tickets |
      | F10 | show or hide the header |
      | q | quit |

      ## Editing

      Tab and Shift-Tab move between fields, Up and Down change status, type,
      priority, assignee and points. Ctrl-S saves, Enter on the title saves and
      closes, Esc discards the draft.

      See the [documentation](index.md) for more.

  - name: Docs
    key: F2
    type: doki
    fetcher: file
    url: index.md
"""
