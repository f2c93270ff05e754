"""PyQt window classes for the TaskMasters GUI."""
from __future__ import annotations

import html
from typing import Dict, Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QCheckBox,
    QComboBox,
    QDialog,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QTabWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..models import PRIORITIES, TaskDraft
from ..notify import ERROR, Banner
from . import presenters
from .app import AppController
from .presenters import ChatButton
from .runner import AsyncRunner
from .styles import (
    ACCENT,
    BORDER_RADIUS,
    ERROR_BG,
    HEADER_BG,
    INCOMING_BUBBLE,
    OUTGOING_BUBBLE,
    PADDING,
    PRIMARY_BG,
    SUCCESS_BG,
    TEXT_MUTED,
    TEXT_PRIMARY,
)


class ServerConfigDialog(QDialog):
    """Dialog used to collect the server URL on first launch."""

    def __init__(self, parent: QWidget | None = None, prefill: str | None = None):
        super().__init__(parent)
        self.setWindowTitle("Server configuration")
        layout = QFormLayout(self)
        self.url_input = QLineEdit(prefill or "http://127.0.0.1:8000")
        layout.addRow("Server URL", self.url_input)
        btn = QPushButton("Save & connect")
        btn.clicked.connect(self.accept)
        layout.addWidget(btn)

    def server_url(self) -> str:
        return self.url_input.text().strip()


class BannerLabel(QLabel):
    """Transient success/error banner fed by the notifier."""

    posted = pyqtSignal(object)

    def __init__(self, controller: AppController, parent: QWidget | None = None):
        super().__init__(parent)
        self.controller = controller
        self.hide()
        self.posted.connect(self._show)
        # notifier listeners run on the loop thread; the signal hops to the Qt thread
        self._listener = self.posted.emit
        controller.notifier.subscribe(self._listener)

    def detach(self) -> None:
        self.controller.notifier.unsubscribe(self._listener)

    def _show(self, banner: Banner) -> None:
        background = ERROR_BG if banner.kind == ERROR else SUCCESS_BG
        self.setStyleSheet(f"background: {background}; padding: {PADDING}px; border-radius: {BORDER_RADIUS}px")
        self.setText(banner.text)
        self.show()
        QTimer.singleShot(int(self.controller.notifier.duration * 1000), self._expire)

    def _expire(self) -> None:
        if self.controller.notifier.current is None:
            self.hide()


class LoginWindow(QMainWindow):
    """Login and registration entry window."""

    logged_in = pyqtSignal()

    def __init__(self, controller: AppController, runner: AsyncRunner):
        super().__init__()
        self.controller = controller
        self.runner = runner
        self.setWindowTitle("TaskMasters - Sign in")
        self.resize(520, 360)
        self._build_ui()

    def ensure_server_url(self) -> None:
        dialog = ServerConfigDialog(self, prefill=self.controller.base_url)
        if dialog.exec() == QDialog.DialogCode.Accepted and dialog.server_url():
            self.controller.set_base_url(dialog.server_url())

    def _build_ui(self) -> None:
        tabs = QTabWidget()
        tabs.addTab(self._build_login_tab(), "Sign In")
        tabs.addTab(self._build_register_tab(), "Create Account")
        self.setCentralWidget(tabs)

    def _build_login_tab(self) -> QWidget:
        widget = QWidget()
        layout = QFormLayout(widget)
        layout.addRow(QLabel("<h2>Welcome Back</h2>"))
        self.login_input = QLineEdit()
        self.login_input.setPlaceholderText("Username")
        self.login_password = QLineEdit()
        self.login_password.setPlaceholderText("Password")
        self.login_password.setEchoMode(QLineEdit.EchoMode.Password)
        layout.addRow("Username", self.login_input)
        layout.addRow("Password", self.login_password)
        self.login_error = QLabel()
        self.login_error.setStyleSheet("color: red")
        self.login_btn = QPushButton("Sign In")
        self.login_btn.clicked.connect(self._login)
        server_btn = QPushButton("Server...")
        server_btn.clicked.connect(self.ensure_server_url)
        layout.addRow(self.login_error)
        layout.addRow(self.login_btn)
        layout.addRow(server_btn)
        return widget

    def _build_register_tab(self) -> QWidget:
        widget = QWidget()
        layout = QFormLayout(widget)
        self.reg_login = QLineEdit()
        self.reg_login.setPlaceholderText("Username")
        self.reg_password = QLineEdit()
        self.reg_password.setPlaceholderText("Password")
        self.reg_password.setEchoMode(QLineEdit.EchoMode.Password)
        self.reg_confirm = QLineEdit()
        self.reg_confirm.setPlaceholderText("Confirm Password")
        self.reg_confirm.setEchoMode(QLineEdit.EchoMode.Password)
        layout.addRow("Username", self.reg_login)
        layout.addRow("Password", self.reg_password)
        layout.addRow("Confirm", self.reg_confirm)
        hint = QLabel("Password: min 8 chars, not trivial")
        hint.setStyleSheet(f"color: {TEXT_MUTED}")
        layout.addRow(hint)
        self.reg_error = QLabel()
        self.reg_error.setStyleSheet("color: red")
        reg_btn = QPushButton("Create Account")
        reg_btn.clicked.connect(self._register)
        layout.addRow(self.reg_error)
        layout.addRow(reg_btn)
        return widget

    def _login(self) -> None:
        self.login_error.clear()
        self.login_btn.setEnabled(False)
        coro = self.controller.login(self.login_input.text(), self.login_password.text())
        self.runner.submit(coro, self._login_done)

    def _login_done(self, result) -> None:
        self.login_btn.setEnabled(True)
        if not result.ok:
            self.login_error.setText(str(result.error))
            return
        self.login_password.clear()
        self.logged_in.emit()

    def _register(self) -> None:
        self.reg_error.clear()
        coro = self.controller.register(self.reg_login.text(), self.reg_password.text(), self.reg_confirm.text())
        self.runner.submit(coro, self._register_done)

    def _register_done(self, result) -> None:
        if not result.ok:
            self.reg_error.setText(str(result.error))
            return
        QMessageBox.information(self, "Registered", "Account created. You can sign in now.")


class ChatWindow(QDialog):
    """Transcript and composer for one friend; closing it closes the session."""

    closed = pyqtSignal(int)

    def __init__(self, button: ChatButton, runner: AsyncRunner, parent: QWidget | None = None):
        super().__init__(parent)
        self.button = button
        self.runner = runner
        self.setWindowTitle(f"Chat with {button.friend.username}")
        self.resize(420, 520)
        self._build_ui()
        self.runner.submit(button.open(), lambda _: self.render())

    def _build_ui(self) -> None:
        grid = QGridLayout(self)
        title = QLabel(self.button.friend.username)
        title.setStyleSheet("font-size: 16px; font-weight: bold")
        grid.addWidget(title, 0, 0)
        close_btn = QPushButton("✕")
        close_btn.setAccessibleName("Close chat")
        close_btn.clicked.connect(self.close)
        grid.addWidget(close_btn, 0, 1)

        self.messages_view = QTextEdit()
        self.messages_view.setReadOnly(True)
        self.messages_view.setObjectName("messages-container")
        grid.addWidget(self.messages_view, 1, 0, 1, 2)

        self.message_input = QLineEdit()
        self.message_input.setPlaceholderText("Type a message...")
        self.message_input.textChanged.connect(self._update_send_state)
        self.message_input.returnPressed.connect(self._send_message)
        grid.addWidget(self.message_input, 2, 0)

        self.send_btn = QPushButton("Send")
        self.send_btn.setEnabled(False)
        self.send_btn.clicked.connect(self._send_message)
        grid.addWidget(self.send_btn, 2, 1)

    def _update_send_state(self) -> None:
        self.send_btn.setEnabled(self.button.is_open and bool(self.message_input.text().strip()))

    def render(self) -> None:
        lines = presenters.transcript_lines(self.button.session)
        if not lines:
            self.messages_view.setHtml(f'<p style="color:{TEXT_MUTED}">{presenters.NO_MESSAGES}</p>')
        else:
            self.messages_view.setHtml("".join(self._format_line(line) for line in lines))
        # newest message is always last
        bar = self.messages_view.verticalScrollBar()
        bar.setValue(bar.maximum())
        self._update_send_state()

    @staticmethod
    def _format_line(line: presenters.TranscriptLine) -> str:
        align = "right" if line.outgoing else "left"
        bubble_color = OUTGOING_BUBBLE if line.outgoing else INCOMING_BUBBLE
        return (
            f'<div style="text-align:{align}; margin:6px 0;">'
            f'<span style="background:{bubble_color}; padding:8px;">'
            f"<b>[{line.time}] {html.escape(line.author)}:</b> {html.escape(line.text)}</span></div>"
        )

    def _send_message(self) -> None:
        text = self.message_input.text()
        if not text.strip():
            return
        self.send_btn.setEnabled(False)
        self.runner.submit(self.button.session.send_message(text), lambda result: self._sent(text, result))

    def _sent(self, text: str, result) -> None:
        if result.ok and result.value and self.message_input.text() == text:
            self.message_input.clear()
        self.render()

    def closeEvent(self, event) -> None:  # noqa: N802
        self.runner.call(self.button.close)
        self.closed.emit(self.button.friend.id)
        super().closeEvent(event)


class FriendsTab(QWidget):
    changed = pyqtSignal()

    def __init__(self, controller: AppController, runner: AsyncRunner, parent: QWidget | None = None):
        super().__init__(parent)
        self.controller = controller
        self.runner = runner
        self.buttons: Dict[int, ChatButton] = {}
        self.chat_windows: Dict[int, ChatWindow] = {}
        layout = QVBoxLayout(self)
        self.heading = QLabel(presenters.LOADING_FRIENDS)
        self.heading.setStyleSheet("font-size: 16px; font-weight: bold")
        self.hint = QLabel(presenters.NO_FRIENDS_HINT)
        self.hint.setStyleSheet(f"color: {TEXT_MUTED}")
        self.list = QListWidget()
        layout.addWidget(self.heading)
        layout.addWidget(self.hint)
        layout.addWidget(self.list, 1)

    def refresh(self) -> None:
        manager = self.controller.friends
        self.heading.setText(presenters.friends_heading(manager))
        self.hint.setVisible(not manager.friends)
        self.buttons = presenters.sync_chat_buttons(self.buttons, manager.friends, self.controller.chat_button)
        for friend_id in [fid for fid in self.chat_windows if fid not in self.buttons]:
            self.chat_windows.pop(friend_id).close()
        self.list.clear()
        for row in presenters.friend_rows(manager.friends):
            self._add_row(row)

    def _add_row(self, row: presenters.FriendRow) -> None:
        widget = QWidget()
        layout = QHBoxLayout(widget)
        layout.addWidget(QLabel(f"<b>{html.escape(row.username)}</b>"))
        since = QLabel(f"Friends since {row.since}" if row.since else "")
        since.setStyleSheet(f"color: {TEXT_MUTED}")
        layout.addWidget(since)
        layout.addStretch()
        chat_btn = QPushButton(presenters.CHAT_LABEL)
        chat_btn.clicked.connect(lambda _, fid=row.friend_id: self._open_chat(fid))
        remove_btn = QPushButton("Remove")
        remove_btn.clicked.connect(lambda _, r=row: self._remove(r))
        layout.addWidget(chat_btn)
        layout.addWidget(remove_btn)
        item = QListWidgetItem()
        item.setSizeHint(widget.sizeHint())
        self.list.addItem(item)
        self.list.setItemWidget(item, widget)

    def _open_chat(self, friend_id: int) -> None:
        window = self.chat_windows.get(friend_id)
        if window is None:
            window = ChatWindow(self.buttons[friend_id], self.runner, self)
            window.closed.connect(lambda fid: self.chat_windows.pop(fid, None))
            self.chat_windows[friend_id] = window
        window.show()
        window.raise_()

    def _remove(self, row: presenters.FriendRow) -> None:
        answer = QMessageBox.question(self, "Remove friend", f"Remove {row.username} from your friends?")
        if answer != QMessageBox.StandardButton.Yes:
            return
        self.runner.submit(self.controller.friends.remove_friend(row.friend_id), lambda _: self.changed.emit())


class RequestsTab(QWidget):
    changed = pyqtSignal()

    def __init__(self, controller: AppController, runner: AsyncRunner, parent: QWidget | None = None):
        super().__init__(parent)
        self.controller = controller
        self.runner = runner
        layout = QVBoxLayout(self)

        search_box = QGroupBox("Find Friends")
        search_layout = QHBoxLayout(search_box)
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Enter username...")
        self.search_input.returnPressed.connect(self._send_request)
        send_btn = QPushButton("Send Request")
        send_btn.clicked.connect(self._send_request)
        search_layout.addWidget(self.search_input)
        search_layout.addWidget(send_btn)
        layout.addWidget(search_box)

        incoming_box = QGroupBox("Friend Requests")
        self.incoming_list = QListWidget()
        QVBoxLayout(incoming_box).addWidget(self.incoming_list)
        layout.addWidget(incoming_box, 1)

        outgoing_box = QGroupBox("Sent Requests")
        self.outgoing_list = QListWidget()
        QVBoxLayout(outgoing_box).addWidget(self.outgoing_list)
        layout.addWidget(outgoing_box, 1)

    def refresh(self) -> None:
        manager = self.controller.friends
        self._fill(self.incoming_list, presenters.incoming_rows(manager))
        self._fill(self.outgoing_list, presenters.outgoing_rows(manager))

    def _fill(self, target: QListWidget, rows) -> None:
        target.clear()
        for row in rows:
            widget = QWidget()
            layout = QHBoxLayout(widget)
            layout.addWidget(QLabel(f"<b>{html.escape(row.username)}</b>"))
            sent = QLabel(row.sent)
            sent.setStyleSheet(f"color: {TEXT_MUTED}")
            layout.addWidget(sent)
            layout.addStretch()
            if row.status == "Pending":
                layout.addWidget(QLabel("Pending"))
            for action in row.actions:
                btn = QPushButton(action)
                btn.clicked.connect(lambda _, a=action, rid=row.request_id: self._act(a, rid))
                layout.addWidget(btn)
            item = QListWidgetItem()
            item.setSizeHint(widget.sizeHint())
            target.addItem(item)
            target.setItemWidget(item, widget)

    def _act(self, action: str, request_id: int) -> None:
        manager = self.controller.friends
        operations = {
            "Accept": manager.accept_request,
            "Decline": manager.decline_request,
            "Cancel": manager.cancel_request,
        }
        self.runner.submit(operations[action](request_id), lambda _: self.changed.emit())

    def _send_request(self) -> None:
        username = self.search_input.text()
        self.runner.submit(self.controller.friends.send_request(username), self._sent)

    def _sent(self, result) -> None:
        if result.ok:
            self.search_input.clear()
        self.changed.emit()


class TasksTab(QWidget):
    def __init__(self, controller: AppController, runner: AsyncRunner, parent: QWidget | None = None):
        super().__init__(parent)
        self.controller = controller
        self.runner = runner
        layout = QVBoxLayout(self)

        stats_row = QHBoxLayout()
        self.stat_labels: Dict[str, QLabel] = {}
        for name in ("Total Tasks", "Completed", "Pending"):
            box = QGroupBox(name)
            label = QLabel("0")
            label.setStyleSheet("font-size: 18px; font-weight: bold")
            QVBoxLayout(box).addWidget(label)
            stats_row.addWidget(box)
            self.stat_labels[name] = label
        layout.addLayout(stats_row)

        form_box = QGroupBox("New Task")
        form = QFormLayout(form_box)
        self.name_input = QLineEdit()
        self.name_input.setPlaceholderText("Enter task name")
        self.date_input = QLineEdit()
        self.date_input.setPlaceholderText("YYYY-MM-DD")
        self.time_input = QLineEdit()
        self.time_input.setPlaceholderText("HH:MM")
        self.priority_input = QComboBox()
        self.priority_input.addItems(PRIORITIES)
        self.priority_input.setCurrentText("Medium")
        self.workload_input = QLineEdit()
        self.workload_input.setPlaceholderText("e.g., 2hr 30min")
        form.addRow("Name", self.name_input)
        form.addRow("Date", self.date_input)
        form.addRow("Time", self.time_input)
        form.addRow("Priority", self.priority_input)
        form.addRow("Workload", self.workload_input)
        self.share_list = QListWidget()
        self.share_list.setSelectionMode(QAbstractItemView.SelectionMode.MultiSelection)
        self.share_list.setMaximumHeight(90)
        form.addRow("Share with", self.share_list)
        create_btn = QPushButton("Create Task")
        create_btn.clicked.connect(self._create)
        self.form_error = QLabel()
        self.form_error.setStyleSheet("color: red")
        form.addRow(self.form_error)
        form.addRow(create_btn)
        layout.addWidget(form_box)

        self.task_tabs = QTabWidget()
        self.personal_list = QListWidget()
        self.shared_list = QListWidget()
        self.task_tabs.addTab(self.personal_list, "My Tasks")
        self.task_tabs.addTab(self.shared_list, "Shared Tasks")
        layout.addWidget(self.task_tabs, 1)

    def refresh(self) -> None:
        board = self.controller.tasks
        if board is None:
            return
        stats = board.stats()
        self.stat_labels["Total Tasks"].setText(str(stats.total))
        self.stat_labels["Completed"].setText(str(stats.completed))
        self.stat_labels["Pending"].setText(str(stats.pending))
        self._fill(self.personal_list, presenters.task_rows(board))
        self._fill(self.shared_list, presenters.task_rows(board, shared=True))

    def refresh_share_targets(self) -> None:
        selected = {item.data(Qt.ItemDataRole.UserRole) for item in self.share_list.selectedItems()}
        self.share_list.clear()
        for friend in self.controller.friends.friends:
            item = QListWidgetItem(friend.username)
            item.setData(Qt.ItemDataRole.UserRole, friend.id)
            self.share_list.addItem(item)
            item.setSelected(friend.id in selected)

    def _fill(self, target: QListWidget, rows) -> None:
        target.clear()
        for row in rows:
            widget = QWidget()
            layout = QHBoxLayout(widget)
            check = QCheckBox(row.title)
            check.setChecked(row.completed)
            check.setEnabled(row.editable)
            check.toggled.connect(lambda _, tid=row.task_id: self._toggle(tid))
            layout.addWidget(check)
            details = QLabel(row.details)
            details.setStyleSheet(f"color: {TEXT_MUTED}")
            layout.addWidget(details)
            layout.addStretch()
            if row.editable:
                delete_btn = QPushButton("Delete")
                delete_btn.clicked.connect(lambda _, r=row: self._delete(r))
                layout.addWidget(delete_btn)
            item = QListWidgetItem()
            item.setSizeHint(widget.sizeHint())
            target.addItem(item)
            target.setItemWidget(item, widget)

    def _create(self) -> None:
        self.form_error.clear()
        draft = TaskDraft(
            name=self.name_input.text(),
            date=self.date_input.text().strip(),
            time=self.time_input.text().strip(),
            priority=self.priority_input.currentText(),
            workload=self.workload_input.text(),
            shared_with=[item.data(Qt.ItemDataRole.UserRole) for item in self.share_list.selectedItems()],
        )
        self.runner.submit(self.controller.tasks.create(draft), self._created)

    def _created(self, result) -> None:
        if not result.ok:
            self.form_error.setText(str(result.error))
        else:
            for field in (self.name_input, self.date_input, self.time_input, self.workload_input):
                field.clear()
            self.share_list.clearSelection()
        self.refresh()

    def _toggle(self, task_id: int) -> None:
        self.runner.submit(self.controller.tasks.toggle(task_id), lambda _: self.refresh())

    def _delete(self, row: presenters.TaskRow) -> None:
        answer = QMessageBox.question(self, "Delete task", f"Delete '{row.title}'?")
        if answer != QMessageBox.StandardButton.Yes:
            return
        self.runner.submit(self.controller.tasks.delete(row.task_id), lambda _: self.refresh())


class MainWindow(QMainWindow):
    """Tabbed main window: tasks, friends and friend requests."""

    logged_out = pyqtSignal()

    def __init__(self, controller: AppController, runner: AsyncRunner):
        super().__init__()
        self.controller = controller
        self.runner = runner
        self.setWindowTitle("TaskMasters")
        self.resize(1024, 720)
        self._build_ui()
        self.refresh_all()

    def _build_ui(self) -> None:
        container = QWidget()
        layout = QVBoxLayout(container)

        header = QWidget()
        header.setStyleSheet(f"background: {HEADER_BG}")
        header_layout = QHBoxLayout(header)
        header_layout.addWidget(QLabel("<h1>TaskMasters</h1>"))
        header_layout.addStretch()
        header_layout.addWidget(QLabel(f"Welcome, {html.escape(self.controller.user.username)}!"))
        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.refresh_all)
        logout_btn = QPushButton("Logout")
        logout_btn.clicked.connect(self._logout)
        header_layout.addWidget(refresh_btn)
        header_layout.addWidget(logout_btn)
        layout.addWidget(header)

        self.banner = BannerLabel(self.controller)
        layout.addWidget(self.banner)

        self.tabs = QTabWidget()
        self.tasks_tab = TasksTab(self.controller, self.runner)
        self.friends_tab = FriendsTab(self.controller, self.runner)
        self.requests_tab = RequestsTab(self.controller, self.runner)
        self.friends_tab.changed.connect(self._friend_graph_changed)
        self.requests_tab.changed.connect(self._friend_graph_changed)
        self.tabs.addTab(self.tasks_tab, "Tasks")
        self.tabs.addTab(self.friends_tab, "My Friends")
        self.tabs.addTab(self.requests_tab, "Requests")
        layout.addWidget(self.tabs, 1)

        container.setStyleSheet(
            f"QWidget {{ background: {PRIMARY_BG}; color: {TEXT_PRIMARY}; }}\n"
            f"QLineEdit, QTextEdit {{ background: white; border: 1px solid #d1d5db; border-radius: {BORDER_RADIUS}px; }}\n"
            f"QPushButton {{ background: {ACCENT}; color: white; padding: 6px 12px; border-radius: {BORDER_RADIUS}px; }}"
        )
        self.setCentralWidget(container)

    def refresh_all(self) -> None:
        self.runner.submit(self.controller.friends.load_all(), lambda _: self._friend_graph_changed())
        self.runner.submit(self.controller.tasks.load_all(), lambda _: self.tasks_tab.refresh())

    def _friend_graph_changed(self) -> None:
        if self.controller.friends is None:
            return
        self.friends_tab.refresh()
        self.requests_tab.refresh()
        self.tasks_tab.refresh_share_targets()
        labels = presenters.tab_labels(self.controller.friends)
        self.tabs.setTabText(1, labels["friends"])
        self.tabs.setTabText(2, labels["requests"])

    def _logout(self) -> None:
        answer = QMessageBox.question(self, "Logout", "Are you sure you want to logout?")
        if answer != QMessageBox.StandardButton.Yes:
            return
        for window in list(self.friends_tab.chat_windows.values()):
            window.close()
        self.runner.call(self.controller.logout, on_done=lambda _: self.logged_out.emit())


class TaskMastersApplication:
    """Top-level class wiring windows together."""

    def __init__(self):
        self.app = QApplication.instance() or QApplication([])
        self.runner = AsyncRunner()
        self.controller = AppController()
        self.login_window = LoginWindow(self.controller, self.runner)
        self.main_window: Optional[MainWindow] = None
        self.login_window.logged_in.connect(self._on_logged_in)

    def _on_logged_in(self) -> None:
        self.main_window = MainWindow(self.controller, self.runner)
        self.main_window.logged_out.connect(self._show_login)
        self.login_window.hide()
        self.main_window.show()

    def _show_login(self) -> None:
        self.login_window.show()
        if self.main_window:
            self.main_window.banner.detach()
            self.main_window.close()
            self.main_window = None

    def run(self) -> int:
        if self.controller.user is not None:
            self._on_logged_in()
        else:
            self.login_window.show()
        try:
            return self.app.exec()
        finally:
            self.runner.shutdown()


__all__ = ["ChatWindow", "LoginWindow", "MainWindow", "TaskMastersApplication"]
